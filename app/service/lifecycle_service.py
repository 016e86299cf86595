# app/service/lifecycle_service.py
"""
Мягкое удаление узлов иерархии.

    [active] --soft_delete (нет живых детей)--> [deleted]
    [deleted] --create с тем же кодом--> [active]  (поля перезаписаны, stats = 0)

Других переходов нет: отдельного "restore" не существует.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from app.core.errors import ValidationError
from app.db.base import utcnow


def soft_delete(node, live_children: int, children_label: str, user_id: str) -> None:
    if live_children > 0:
        raise ValidationError(
            f"Cannot delete {type(node).__name__.lower()} with active {children_label}. "
            f"Remove all {children_label} first.",
            details={"active_children": live_children},
        )
    now = utcnow()
    node.is_deleted = True
    node.deleted_at = now
    node.updated_at = now
    node.updated_by = user_id


def reactivate(node, fields: Mapping[str, Any], stats_fields: Iterable[str], user_id: str) -> None:
    """Повторное создание с кодом удалённого документа: перезапись, статистика с нуля."""
    now = utcnow()
    for key, value in fields.items():
        setattr(node, key, value)
    for stat in stats_fields:
        setattr(node, stat, 0)
    node.is_deleted = False
    node.deleted_at = None
    node.updated_at = now
    node.updated_by = user_id
