# app/models/mixins.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime, func, false
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import utcnow

# Денормализованные поля (имена предков, path, stats): кэш, который
# обновляет воркер пересчёта. Инварианты на них не опираются.
DERIVED = {"derived": True}


class TenantMixin:
    """Документ в пространстве арендатора: PK = (business_id, id)."""

    business_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)


class AuditMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    created_by: Mapped[str] = mapped_column(String(128), nullable=False, server_default="")
    updated_by: Mapped[str] = mapped_column(String(128), nullable=False, server_default="")


class NodeMixin(TenantMixin, AuditMixin):
    """Общие поля узлов иерархии (склад / зона / стеллаж / полка)."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False, server_default="")

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    name_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    location_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
