from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional
from uuid import uuid4

from app.db.base import utcnow
from app.models.entity_log import EntityLog
from app.models.enums import EntityType, LogType
from app.repositories.log_repo import LogRepository

Changes = Dict[str, Dict[str, Any]]


def diff(before: Mapping[str, Any], after: Mapping[str, Any], fields: Iterable[str]) -> Changes:
    """{field: {"from": old, "to": new}} только для реально изменившихся полей."""
    changes: Changes = {}
    for f in fields:
        old, new = before.get(f), after.get(f)
        if old != new:
            changes[f] = {"from": old, "to": new}
    return changes


def snapshot(entity, fields: Iterable[str]) -> Dict[str, Any]:
    return {f: getattr(entity, f) for f in fields}


class AuditService:
    """Пишет неизменяемую запись в logs сущности в рамках текущей единицы работы."""

    def __init__(self, repo: LogRepository):
        self.repo = repo

    def record(
        self,
        entity_type: EntityType,
        entity,
        action: LogType,
        user_id: str,
        *,
        changes: Optional[Changes] = None,
        note: Optional[str] = None,
        from_location: Optional[dict] = None,
        to_location: Optional[dict] = None,
        quantity: Optional[int] = None,
        quantity_before: Optional[int] = None,
        quantity_after: Optional[int] = None,
        related_movement_id: Optional[str] = None,
    ) -> EntityLog:
        entry = EntityLog(
            business_id=entity.business_id,
            entity_type=entity_type.value,
            entity_id=entity.id,
            id=uuid4().hex,
            type=action.value,
            changes=changes or None,
            note=note,
            from_location=from_location,
            to_location=to_location,
            quantity=quantity,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            related_movement_id=related_movement_id,
            timestamp=utcnow(),
            user_id=user_id,
        )
        return self.repo.add(entry)
