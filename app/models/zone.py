# app/models/zone.py
from __future__ import annotations

from sqlalchemy import String, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import NodeMixin, DERIVED


class Zone(NodeMixin, Base):
    """id зоны = нормализованный код (trim + upper)."""

    __tablename__ = "zones"

    description: Mapped[str] = mapped_column(String(1024), nullable=False, server_default="")

    warehouse_id: Mapped[str] = mapped_column(String(128), nullable=False)
    warehouse_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)

    total_racks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_shelves: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)

    __table_args__ = (
        Index("ix_zones_biz_wh_deleted", "business_id", "warehouse_id", "is_deleted"),
    )
