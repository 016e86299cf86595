# app/models/entity_log.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, JSON, DateTime, func, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class EntityLog(Base):
    """
    Подколлекция logs каждой сущности (warehouse/zone/rack/shelf/placement).
    Записи неизменяемые: только вставка.
    """

    __tablename__ = "entity_logs"

    business_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    entity_id: Mapped[str] = mapped_column(String(300), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # created | updated | deleted | restored | moved | added | removed | quantity_adjusted
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    changes: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    note: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    from_location: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    to_location: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # только для логов размещений
    quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quantity_before: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quantity_after: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    related_movement_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_entity_logs_entity_ts", "business_id", "entity_type", "entity_id", "timestamp"),
        Index("ix_entity_logs_biz_ts", "business_id", "timestamp"),
    )
