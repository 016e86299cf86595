# app/models/upc.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import TenantMixin, AuditMixin


class UPC(TenantMixin, AuditMixin, Base):
    """Одна физическая единица товара. Создаётся пачкой при приёмке GRN."""

    __tablename__ = "upcs"

    product_id: Mapped[str] = mapped_column(String(128), nullable=False)
    # none | inbound | outbound
    put_away: Mapped[str] = mapped_column(String(16), nullable=False, server_default="inbound")

    warehouse_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    zone_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    rack_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    shelf_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    placement_id: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    store_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    grn_ref: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        Index("ix_upcs_biz_placement_state", "business_id", "placement_id", "put_away"),
    )
