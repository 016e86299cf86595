# app/models/placement.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Integer, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import TenantMixin, AuditMixin, DERIVED


def placement_id(product_id: str, shelf_id: str) -> str:
    # один документ на пару товар/полка
    return f"{product_id}_{shelf_id}"


class Placement(TenantMixin, AuditMixin, Base):
    __tablename__ = "placements"

    product_id: Mapped[str] = mapped_column(String(128), nullable=False)
    product_sku: Mapped[str] = mapped_column(String(128), nullable=False, server_default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    coordinates: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    location_code: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    warehouse_id: Mapped[str] = mapped_column(String(128), nullable=False)
    warehouse_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    zone_id: Mapped[str] = mapped_column(String(128), nullable=False)
    zone_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    rack_id: Mapped[str] = mapped_column(String(128), nullable=False)
    rack_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    shelf_id: Mapped[str] = mapped_column(String(128), nullable=False)
    shelf_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)

    last_movement_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_movement_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_placements_biz_shelf_product", "business_id", "shelf_id", "product_id"),
    )
