from typing import List

from sqlalchemy import select

from app.models.warehouse import Warehouse
from app.repositories.node_repo import NodeRepository


class WarehouseRepository(NodeRepository[Warehouse]):
    model = Warehouse
    order_field = "name"

    async def find_by_code(self, business_id: str, code: str) -> List[Warehouse]:
        """Все склады с этим кодом, включая удалённые (для повторного использования кода)."""
        result = await self.session.execute(
            select(Warehouse)
            .where(Warehouse.business_id == business_id, Warehouse.code == code)
            .order_by(Warehouse.created_at.desc())
        )
        return list(result.scalars().all())
