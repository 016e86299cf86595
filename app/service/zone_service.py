import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError, ValidationError, integrity_to_error
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.domain.codes import normalize_code, require_text
from app.models.enums import EntityType, LogType
from app.models.zone import Zone
from app.repositories.log_repo import LogRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.warehouse_repo import WarehouseRepository
from app.repositories.zone_repo import ZoneRepository
from app.schemas.zone import ZoneCreate, ZoneMove, ZoneUpdate
from app.service.audit_service import AuditService, diff, snapshot
from app.service.lifecycle_service import reactivate, soft_delete
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)

ZONE_STATS = ("total_racks", "total_shelves", "total_products")


class ZoneService:
    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.repo = ZoneRepository(session)
        self.warehouses = WarehouseRepository(session)
        self.racks = RackRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    async def create_zone(self, business_id: str, user_id: str, data: ZoneCreate) -> Zone:
        name = require_text(data.name, "Zone name")
        code = normalize_code(require_text(data.code, "Zone code"))

        try:
            async with UnitOfWork(self.session) as uow:
                warehouse = await self.warehouses.get_active(business_id, data.warehouse_id)
                if not warehouse:
                    raise NotFoundError(f"Warehouse '{data.warehouse_id}' not found")

                existing = await self.repo.lock(business_id, code)
                if existing and not existing.is_deleted:
                    raise ConflictError(f'Zone with code "{code}" already exists', details={"code": code})

                fields = dict(
                    name=name,
                    code=code,
                    description=(data.description or "").strip(),
                    warehouse_id=warehouse.id,
                    warehouse_name=warehouse.name,
                )
                if existing:
                    reactivate(existing, fields, ZONE_STATS, user_id)
                    zone, action = existing, LogType.restored
                else:
                    zone = Zone(business_id=business_id, id=code, created_by=user_id, updated_by=user_id, **fields)
                    self.repo.add(zone)
                    action = LogType.created

                self.audit.record(EntityType.zone, zone, action, user_id, note=f"Zone {action.value}")
                self.propagation.schedule(uow, business_id, EntityType.zone.value, zone.id, action.value)
        except IntegrityError as e:
            raise integrity_to_error(e, f'Zone with code "{code}" already exists')

        logger.info(f"zone {action.value}: business={business_id} id={code}")
        return zone

    async def list_zones(self, business_id: str, warehouse_id: Optional[str] = None) -> List[Zone]:
        return await self.repo.list_active(business_id, warehouse_id)

    async def update_zone(self, business_id: str, user_id: str, zone_id: str, data: ZoneUpdate) -> Zone:
        name = require_text(data.name, "Zone name")
        fields = ("name", "description")

        async with UnitOfWork(self.session) as uow:
            zone = await self.repo.lock(business_id, zone_id)
            if not zone or zone.is_deleted:
                raise NotFoundError(f"Zone '{zone_id}' not found")

            before = snapshot(zone, fields)
            zone.name = name
            if data.description is not None:
                zone.description = data.description.strip()
            changes = diff(before, snapshot(zone, fields), fields)
            if not changes:
                return zone

            if "name" in changes:
                zone.name_version += 1
            zone.updated_at = utcnow()
            zone.updated_by = user_id
            self.audit.record(EntityType.zone, zone, LogType.updated, user_id, changes=changes)
            if "name" in changes:
                self.propagation.schedule(uow, business_id, EntityType.zone.value, zone.id, "renamed")
        return zone

    async def delete_zone(self, business_id: str, user_id: str, zone_id: str) -> None:
        async with UnitOfWork(self.session) as uow:
            zone = await self.repo.lock(business_id, zone_id)
            if not zone or zone.is_deleted:
                raise NotFoundError(f"Zone '{zone_id}' not found")

            live = await self.racks.count_active(business_id, zone.id)
            soft_delete(zone, live, "racks", user_id)
            self.audit.record(EntityType.zone, zone, LogType.deleted, user_id, note="Zone deleted")
            self.propagation.schedule(uow, business_id, EntityType.zone.value, zone.id, LogType.deleted.value)
        logger.info(f"zone deleted: business={business_id} id={zone_id}")

    async def move_zone(self, business_id: str, user_id: str, zone_id: str, data: ZoneMove) -> Zone:
        """Зона переезжает целиком; позиций у зон нет, поэтому сдвигов соседей тоже нет."""
        async with UnitOfWork(self.session) as uow:
            zone = await self.repo.lock(business_id, zone_id)
            if not zone or zone.is_deleted:
                raise NotFoundError(f"Zone '{zone_id}' not found")
            if zone.warehouse_id == data.target_warehouse_id:
                raise ValidationError("Zone is already in this warehouse")

            target = await self.warehouses.get_active(business_id, data.target_warehouse_id)
            if not target:
                raise NotFoundError(f"Warehouse '{data.target_warehouse_id}' not found")

            from_location = {"warehouse_id": zone.warehouse_id, "warehouse_name": zone.warehouse_name}
            to_location = {"warehouse_id": target.id, "warehouse_name": target.name}

            zone.warehouse_id = target.id
            zone.warehouse_name = target.name
            zone.location_version += 1
            zone.updated_at = utcnow()
            zone.updated_by = user_id

            self.audit.record(
                EntityType.zone, zone, LogType.moved, user_id,
                from_location=from_location, to_location=to_location,
                note=f"Zone moved to warehouse {target.name}",
            )
            self.propagation.schedule(uow, business_id, EntityType.zone.value, zone.id, LogType.moved.value)
        logger.info(f"zone moved: business={business_id} id={zone_id} -> warehouse={data.target_warehouse_id}")
        return zone
