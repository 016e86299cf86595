from typing import List, Optional, Tuple

from sqlalchemy import select, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.movement import Movement


class MovementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, movement: Movement) -> Movement:
        self.session.add(movement)
        return movement

    async def get(self, business_id: str, id: str) -> Optional[Movement]:
        return await self.session.scalar(
            select(Movement).where(Movement.business_id == business_id, Movement.id == id)
        )

    async def list_page(
        self,
        business_id: str,
        *,
        type: Optional[str] = None,
        product_sku: Optional[str] = None,
        warehouse_id: Optional[str] = None,
        start_after: Optional[str] = None,
        limit: int = 50,
    ) -> Tuple[List[Movement], bool]:
        """Keyset-пагинация по (timestamp desc, id desc). Возвращает (страница, есть_ещё)."""
        query = select(Movement).where(Movement.business_id == business_id)
        if type:
            query = query.where(Movement.type == type)
        if product_sku:
            query = query.where(Movement.product_sku == product_sku)
        if warehouse_id:
            # по складу назначения
            query = query.where(Movement.to_warehouse_id == warehouse_id)

        if start_after:
            cursor = await self.get(business_id, start_after)
            if cursor is not None:
                query = query.where(
                    or_(
                        Movement.timestamp < cursor.timestamp,
                        and_(Movement.timestamp == cursor.timestamp, Movement.id < cursor.id),
                    )
                )

        result = await self.session.execute(
            query.order_by(Movement.timestamp.desc(), Movement.id.desc()).limit(limit + 1)
        )
        rows = list(result.scalars().all())
        return rows[:limit], len(rows) > limit
