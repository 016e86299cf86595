# app/auth/authorization.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import ForbiddenError, UnauthorizedError, ValidationError, WarehouseError
from app.models.enums import MemberRole
from app.repositories.member_repo import MemberRepository

logger = logging.getLogger(__name__)

WRITE_ROLES = frozenset({MemberRole.owner.value, MemberRole.admin.value, MemberRole.staff.value})


@dataclass(frozen=True)
class AuthorizationResult:
    """
    Итог проверки доступа к бизнесу. Хендлеры работают только с ним и
    не повторяют логику ролей. target_business_id: пространство
    арендатора, в которое пишет операция.
    """

    authorised: bool
    user_id: Optional[str] = None
    role: Optional[str] = None
    target_business_id: Optional[str] = None
    status: int = 200
    error: Optional[str] = None

    @property
    def can_write(self) -> bool:
        return self.authorised and self.role in WRITE_ROLES

    def raise_for_status(self) -> "AuthorizationResult":
        if self.authorised:
            return self
        if self.status == 400:
            raise ValidationError(self.error)
        if self.status == 401:
            raise UnauthorizedError(self.error)
        if self.status == 403:
            raise ForbiddenError(self.error)
        err = WarehouseError(self.error)
        err.status_code = self.status
        raise err

    def require_write(self) -> "AuthorizationResult":
        self.raise_for_status()
        if not self.can_write:
            raise ForbiddenError("Your role does not allow modifying the warehouse")
        return self


def denied(status: int, error: str, user_id: Optional[str] = None) -> AuthorizationResult:
    return AuthorizationResult(authorised=False, user_id=user_id, status=status, error=error)


class BusinessAuthorizer:
    """owner (user_id == business_id) / супер-админ / активный участник бизнеса."""

    def __init__(self, members: MemberRepository, super_admin_id: Optional[str] = None):
        self.members = members
        self.super_admin_id = super_admin_id

    async def authorise(self, business_id: str, user_id: Optional[str]) -> AuthorizationResult:
        if not business_id:
            return denied(400, "Business ID is required")
        if not user_id:
            return denied(401, "User not logged in")

        if user_id == business_id:
            role = MemberRole.owner.value
        elif self.super_admin_id and user_id == self.super_admin_id:
            role = MemberRole.admin.value
        else:
            member = await self.members.get(business_id, user_id)
            if not member or member.status != "active":
                logger.warning(f"access denied: user={user_id} business={business_id}")
                return denied(403, "You do not have access to this business", user_id)
            role = member.role

        return AuthorizationResult(
            authorised=True,
            user_id=user_id,
            role=role,
            target_business_id=business_id,
        )
