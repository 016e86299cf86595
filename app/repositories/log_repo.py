from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.entity_log import EntityLog


class LogRepository:
    """Логи только добавляются; методов обновления/удаления нет намеренно."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, entry: EntityLog) -> EntityLog:
        self.session.add(entry)
        return entry

    async def _newest_first(self, query, limit: int, log_type: Optional[str]) -> List[EntityLog]:
        if log_type:
            query = query.where(EntityLog.type == log_type)
        result = await self.session.execute(
            query.order_by(EntityLog.timestamp.desc(), EntityLog.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_entity(
        self,
        business_id: str,
        entity_type: str,
        entity_id: str,
        limit: int,
        log_type: Optional[str] = None,
    ) -> List[EntityLog]:
        query = select(EntityLog).where(
            EntityLog.business_id == business_id,
            EntityLog.entity_type == entity_type,
            EntityLog.entity_id == entity_id,
        )
        return await self._newest_first(query, limit, log_type)

    async def list_recent(
        self,
        business_id: str,
        entity_types: Sequence[str],
        limit: int,
        log_type: Optional[str] = None,
    ) -> List[EntityLog]:
        query = select(EntityLog).where(
            EntityLog.business_id == business_id,
            EntityLog.entity_type.in_(list(entity_types)),
        )
        return await self._newest_first(query, limit, log_type)
