from __future__ import annotations

from typing import Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import utcnow
from app.domain.positions import Shifts, Sibling

NodeT = TypeVar("NodeT")


class NodeRepository(Generic[NodeT]):
    """
    Общий доступ к узлам иерархии. Репозиторий ничего не коммитит,
    фиксирует изменения UnitOfWork сервиса.
    """

    model: Type[NodeT]
    parent_field: Optional[str] = None
    order_field: str = "name"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, business_id: str, id: str) -> Optional[NodeT]:
        return await self.session.scalar(
            select(self.model).where(
                self.model.business_id == business_id,
                self.model.id == id,
            )
        )

    async def get_active(self, business_id: str, id: str) -> Optional[NodeT]:
        node = await self.get(business_id, id)
        if node is None or node.is_deleted:
            return None
        return node

    async def lock(self, business_id: str, id: str) -> Optional[NodeT]:
        """SELECT ... FOR UPDATE: сериализует изменения соседей внутри этого родителя."""
        return await self.session.scalar(
            select(self.model)
            .where(self.model.business_id == business_id, self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )

    def _parent_filter(self, business_id: str, parent_id: Optional[str]):
        conds = [self.model.business_id == business_id, self.model.is_deleted.is_(False)]
        if self.parent_field and parent_id is not None:
            conds.append(getattr(self.model, self.parent_field) == parent_id)
        return conds

    async def list_active(self, business_id: str, parent_id: Optional[str] = None) -> List[NodeT]:
        order_col = getattr(self.model, self.order_field)
        result = await self.session.execute(
            select(self.model)
            .where(*self._parent_filter(business_id, parent_id))
            .order_by(order_col.asc(), self.model.id.asc())
        )
        return list(result.scalars().all())

    async def list_siblings_for_update(self, business_id: str, parent_id: str) -> List[NodeT]:
        result = await self.session.execute(
            select(self.model)
            .where(*self._parent_filter(business_id, parent_id))
            .order_by(getattr(self.model, self.order_field).asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_active(self, business_id: str, parent_id: str) -> int:
        return int(
            await self.session.scalar(
                select(func.count()).select_from(self.model).where(*self._parent_filter(business_id, parent_id))
            )
            or 0
        )

    def add(self, node: NodeT) -> NodeT:
        self.session.add(node)
        return node

    @staticmethod
    def as_siblings(nodes: Sequence[NodeT]) -> List[Sibling]:
        return [Sibling(id=n.id, position=n.position or 0) for n in nodes]

    @staticmethod
    def apply_shifts(nodes: Sequence[NodeT], shifts: Shifts, user_id: str) -> int:
        by_id: Dict[str, NodeT] = {n.id: n for n in nodes}
        now = utcnow()
        for node_id, position in shifts.items():
            node = by_id[node_id]
            node.position = position
            node.updated_at = now
            node.updated_by = user_id
        return len(shifts)
