# app/models/business_member.py
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import AuditMixin


class BusinessMember(AuditMixin, Base):
    __tablename__ = "business_members"

    business_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # admin | staff | vendor
    role: Mapped[str] = mapped_column(String(16), nullable=False, server_default="staff")
    # active | pending | removed
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="pending")
