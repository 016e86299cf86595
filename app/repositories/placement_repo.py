from typing import List, Optional

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.placement import Placement


class PlacementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, business_id: str, id: str) -> Optional[Placement]:
        return await self.session.scalar(
            select(Placement).where(Placement.business_id == business_id, Placement.id == id)
        )

    async def get_for_update(self, business_id: str, id: str) -> Optional[Placement]:
        return await self.session.scalar(
            select(Placement)
            .where(Placement.business_id == business_id, Placement.id == id)
            .with_for_update()
        )

    async def list_by_shelf(self, business_id: str, shelf_id: str) -> List[Placement]:
        result = await self.session.execute(
            select(Placement)
            .where(Placement.business_id == business_id, Placement.shelf_id == shelf_id)
            .order_by(Placement.product_id.asc())
        )
        return list(result.scalars().all())

    async def list_stocked_by_product(self, business_id: str, product_id: str) -> List[Placement]:
        """Где лежит товар: только размещения с остатком."""
        result = await self.session.execute(
            select(Placement)
            .where(
                Placement.business_id == business_id,
                Placement.product_id == product_id,
                Placement.quantity > 0,
            )
            .order_by(
                Placement.warehouse_name.asc(),
                Placement.zone_name.asc(),
                Placement.rack_name.asc(),
                Placement.shelf_name.asc(),
            )
        )
        return list(result.scalars().all())

    async def count_stocked_on_shelf(self, business_id: str, shelf_id: str) -> int:
        return int(
            await self.session.scalar(
                select(func.count())
                .select_from(Placement)
                .where(
                    Placement.business_id == business_id,
                    Placement.shelf_id == shelf_id,
                    Placement.quantity > 0,
                )
            )
            or 0
        )

    def add(self, placement: Placement) -> Placement:
        self.session.add(placement)
        return placement

    async def update_location(self, business_id: str, shelf_id: str, **fields) -> int:
        """Обновить ancestor ids/names у всех размещений полки (после переноса/переименования)."""
        result = await self.session.execute(
            update(Placement)
            .where(Placement.business_id == business_id, Placement.shelf_id == shelf_id)
            .values(**fields)
        )
        return result.rowcount or 0
