# app/models/warehouse.py
from __future__ import annotations

from sqlalchemy import String, Integer, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import NodeMixin, DERIVED


class Warehouse(NodeMixin, Base):
    __tablename__ = "warehouses"

    address: Mapped[str] = mapped_column(String(512), nullable=False, server_default="")
    storage_capacity: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    operational_hours: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    default_gst_state: Mapped[str] = mapped_column(String(64), nullable=False, server_default="")

    total_zones: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_racks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_shelves: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)
    total_products: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", info=DERIVED)

    __table_args__ = (
        # поиск активного склада по коду
        Index("ix_warehouses_biz_code", "business_id", "code", "is_deleted"),
        # не больше одного активного склада на код: гонку двух create ловит БД
        Index(
            "uq_warehouses_biz_code_active",
            "business_id",
            "code",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("is_deleted = 0"),
        ),
    )
