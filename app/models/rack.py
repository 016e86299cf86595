# app/models/rack.py
from __future__ import annotations

from sqlalchemy import String, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import NodeMixin, DERIVED


class Rack(NodeMixin, Base):
    """id стеллажа = нормализованный код; position уникальна среди живых стеллажей зоны."""

    __tablename__ = "racks"

    zone_id: Mapped[str] = mapped_column(String(128), nullable=False)
    zone_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)
    warehouse_id: Mapped[str] = mapped_column(String(128), nullable=False)
    warehouse_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", info=DERIVED)

    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")

    total_shelves: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)

    __table_args__ = (
        # соседи в зоне по порядку
        Index("ix_racks_biz_zone_pos", "business_id", "zone_id", "is_deleted", "position"),
    )
