from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.business_member import BusinessMember


class MemberRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, business_id: str, user_id: str) -> Optional[BusinessMember]:
        return await self.session.scalar(
            select(BusinessMember).where(
                BusinessMember.business_id == business_id,
                BusinessMember.user_id == user_id,
            )
        )
