# app/models/movement.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, JSON, DateTime, func, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow
from app.models.mixins import TenantMixin


class Movement(TenantMixin, Base):
    """Перемещение товара. Только вставка, никогда не обновляется."""

    __tablename__ = "movements"

    product_id: Mapped[str] = mapped_column(String(128), nullable=False)
    product_sku: Mapped[str] = mapped_column(String(128), nullable=False, server_default="")
    # transfer | inbound | outbound | adjustment
    type: Mapped[str] = mapped_column(String(16), nullable=False)

    # снимки локаций: shelf/rack/zone/warehouse id + name
    from_location: Mapped[dict] = mapped_column(JSON, nullable=False)
    to_location: Mapped[dict] = mapped_column(JSON, nullable=False)
    to_warehouse_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")

    __table_args__ = (
        Index("ix_movements_biz_ts", "business_id", "timestamp"),
        Index("ix_movements_biz_type_ts", "business_id", "type", "timestamp"),
    )


def empty_location() -> dict:
    return {
        "shelf_id": None, "shelf_name": None,
        "rack_id": None, "rack_name": None,
        "zone_id": None, "zone_name": None,
        "warehouse_id": None, "warehouse_name": None,
    }
