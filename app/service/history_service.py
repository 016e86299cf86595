from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.models.entity_log import EntityLog
from app.models.enums import EntityType, LogType, MovementType
from app.repositories.log_repo import LogRepository
from app.repositories.movement_repo import MovementRepository
from app.service.stock_service import clamp_limit

# лента "последние изменения" без entity_id
RECENT_TYPES = (EntityType.zone.value, EntityType.rack.value, EntityType.shelf.value)


class HistoryService:
    def __init__(self, session: AsyncSession):
        self.logs = LogRepository(session)
        self.movements = MovementRepository(session)

    async def list_logs(
        self,
        business_id: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        limit: Optional[int] = None,
        log_type: Optional[str] = None,
    ) -> List[EntityLog]:
        if entity_type and entity_type not in {t.value for t in EntityType}:
            raise ValidationError(f"Invalid entity_type '{entity_type}'")
        if entity_id and not entity_type:
            raise ValidationError("entity_type is required when entity_id is given")
        if log_type and log_type not in {t.value for t in LogType}:
            raise ValidationError(f"Invalid log type '{log_type}'")

        limit = clamp_limit(limit)
        if entity_id:
            return await self.logs.list_for_entity(business_id, entity_type, entity_id, limit, log_type)
        types = (entity_type,) if entity_type else RECENT_TYPES
        return await self.logs.list_recent(business_id, types, limit, log_type)

    async def list_movements(
        self,
        business_id: str,
        type: Optional[str] = None,
        product_sku: Optional[str] = None,
        warehouse_id: Optional[str] = None,
        start_after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        if type and type not in {t.value for t in MovementType}:
            raise ValidationError(f"Invalid movement type '{type}'")

        rows, has_more = await self.movements.list_page(
            business_id,
            type=type,
            product_sku=product_sku,
            warehouse_id=warehouse_id,
            start_after=start_after,
            limit=clamp_limit(limit),
        )
        return {
            "movements": rows,
            "has_more": has_more,
            "last_id": rows[-1].id if rows else None,
        }
