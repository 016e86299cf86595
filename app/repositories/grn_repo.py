from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.grn import GRN


class GRNRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_update(self, business_id: str, id: str) -> Optional[GRN]:
        return await self.session.scalar(
            select(GRN).where(GRN.business_id == business_id, GRN.id == id).with_for_update()
        )

    async def find_by_number(self, business_id: str, grn_number: str) -> Optional[GRN]:
        return await self.session.scalar(
            select(GRN).where(GRN.business_id == business_id, GRN.grn_number == grn_number)
        )

    def add(self, grn: GRN) -> GRN:
        self.session.add(grn)
        return grn

    async def delete(self, grn: GRN) -> None:
        await self.session.delete(grn)
