from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.upc import UPC


class UPCRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many_for_update(self, business_id: str, ids: Sequence[str]) -> List[UPC]:
        if not ids:
            return []
        result = await self.session.execute(
            select(UPC)
            .where(UPC.business_id == business_id, UPC.id.in_(list(ids)))
            .with_for_update()
        )
        return list(result.scalars().all())

    async def list_filtered(
        self,
        business_id: str,
        *,
        placement_id: Optional[str] = None,
        put_away: Optional[str] = None,
        limit: int = 100,
    ) -> List[UPC]:
        query = select(UPC).where(UPC.business_id == business_id)
        if placement_id:
            query = query.where(UPC.placement_id == placement_id)
        if put_away:
            query = query.where(UPC.put_away == put_away)
        result = await self.session.execute(query.order_by(UPC.created_at.asc(), UPC.id.asc()).limit(limit))
        return list(result.scalars().all())

    def add_all(self, upcs: Sequence[UPC]) -> None:
        self.session.add_all(list(upcs))
