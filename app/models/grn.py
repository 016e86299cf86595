# app/models/grn.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, JSON, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import TenantMixin, AuditMixin


class GRN(TenantMixin, AuditMixin, Base):
    """Приходная накладная (goods receipt note)."""

    __tablename__ = "grns"

    grn_number: Mapped[str] = mapped_column(String(64), nullable=False)
    # draft | completed | cancelled
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="draft")
    # [{"sku": str, "product_name": str, "received_qty": int}]
    items: Mapped[list] = mapped_column(JSON, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    total_upcs_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        UniqueConstraint("business_id", "grn_number", name="uq_grns_biz_number"),
    )
