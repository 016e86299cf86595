# app/models/shelf.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Integer, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import NodeMixin, DERIVED


class Shelf(NodeMixin, Base):
    __tablename__ = "shelves"

    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # {"aisle": str, "bay": int, "level": int}
    coordinates: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    rack_id: Mapped[str] = mapped_column(String(128), nullable=False)
    rack_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    zone_id: Mapped[str] = mapped_column(String(128), nullable=False)
    zone_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    warehouse_id: Mapped[str] = mapped_column(String(128), nullable=False)
    warehouse_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    path: Mapped[str] = mapped_column(String(1024), nullable=False, server_default="", info=DERIVED)

    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")

    total_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    current_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)

    __table_args__ = (
        Index("ix_shelves_biz_rack_pos", "business_id", "rack_id", "is_deleted", "position"),
    )


def shelf_path(zone_name: str, rack_name: str, shelf_name: str) -> str:
    return f"{zone_name or ''} > {rack_name or ''} > {shelf_name}"
