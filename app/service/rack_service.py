import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError, ValidationError, integrity_to_error
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.domain.codes import normalize_code, require_text
from app.domain.positions import allocate, close_gap, reposition
from app.models.enums import EntityType, LogType
from app.models.rack import Rack
from app.repositories.log_repo import LogRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.shelf_repo import ShelfRepository
from app.repositories.zone_repo import ZoneRepository
from app.schemas.rack import RackCreate, RackUpdate
from app.service.audit_service import AuditService, diff, snapshot
from app.service.lifecycle_service import reactivate, soft_delete
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)

RACK_STATS = ("total_shelves", "total_products")


class RackService:
    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.repo = RackRepository(session)
        self.zones = ZoneRepository(session)
        self.shelves = ShelfRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    async def create_rack(self, business_id: str, user_id: str, data: RackCreate) -> Rack:
        name = require_text(data.name, "Rack name")
        code = normalize_code(require_text(data.code, "Rack code"))

        try:
            async with UnitOfWork(self.session) as uow:
                # блокировка зоны сериализует всех, кто двигает стеллажи внутри неё
                zone = await self.zones.lock(business_id, data.zone_id)
                if not zone or zone.is_deleted:
                    raise NotFoundError(f"Zone '{data.zone_id}' not found")
                if data.warehouse_id and data.warehouse_id != zone.warehouse_id:
                    raise ValidationError("Given zone does not exist in the given warehouse")

                existing = await self.repo.lock(business_id, code)
                if existing and not existing.is_deleted:
                    raise ConflictError(f'Rack with code "{code}" already exists', details={"code": code})

                siblings = await self.repo.list_siblings_for_update(business_id, zone.id)
                allocation = allocate(self.repo.as_siblings(siblings), data.position)
                self.repo.apply_shifts(siblings, allocation.shifts, user_id)

                fields = dict(
                    name=name,
                    code=code,
                    zone_id=zone.id,
                    zone_name=zone.name,
                    warehouse_id=zone.warehouse_id,
                    warehouse_name=zone.warehouse_name,
                    position=allocation.position,
                )
                if existing:
                    reactivate(existing, fields, RACK_STATS, user_id)
                    rack, action = existing, LogType.restored
                else:
                    rack = Rack(business_id=business_id, id=code, created_by=user_id, updated_by=user_id, **fields)
                    self.repo.add(rack)
                    action = LogType.created

                self.audit.record(
                    EntityType.rack, rack, action, user_id,
                    note=f"Rack {action.value} at position {allocation.position}",
                )
                self.propagation.schedule(uow, business_id, EntityType.rack.value, rack.id, action.value)
        except IntegrityError as e:
            raise integrity_to_error(e, f'Rack with code "{code}" already exists')

        logger.info(
            f"rack {action.value}: business={business_id} id={code} zone={data.zone_id} "
            f"position={allocation.position} shifted={len(allocation.shifts)}"
        )
        return rack

    async def list_racks(self, business_id: str, zone_id: str) -> List[Rack]:
        return await self.repo.list_active(business_id, zone_id)

    async def update_rack(self, business_id: str, user_id: str, rack_id: str, data: RackUpdate) -> Rack:
        name = require_text(data.name, "Rack name")
        fields = ("name", "position")

        async with UnitOfWork(self.session) as uow:
            rack = await self.repo.get_active(business_id, rack_id)
            if not rack:
                raise NotFoundError(f"Rack '{rack_id}' not found")
            await self.zones.lock(business_id, rack.zone_id)
            rack = await self.repo.lock(business_id, rack_id)

            before = snapshot(rack, fields)
            rack.name = name
            shifted = 0
            if data.position and data.position > 0 and data.position != rack.position:
                siblings = await self.repo.list_siblings_for_update(business_id, rack.zone_id)
                shifts = reposition(self.repo.as_siblings(siblings), rack.id, rack.position, data.position)
                shifted = self.repo.apply_shifts(siblings, shifts, user_id)
                rack.position = data.position

            changes = diff(before, snapshot(rack, fields), fields)
            if not changes:
                return rack

            if "name" in changes:
                rack.name_version += 1
            rack.updated_at = utcnow()
            rack.updated_by = user_id
            self.audit.record(EntityType.rack, rack, LogType.updated, user_id, changes=changes)
            if "name" in changes:
                self.propagation.schedule(uow, business_id, EntityType.rack.value, rack.id, "renamed")

        logger.info(f"rack updated: business={business_id} id={rack_id} fields={sorted(changes)} shifted={shifted}")
        return rack

    async def delete_rack(self, business_id: str, user_id: str, rack_id: str) -> None:
        async with UnitOfWork(self.session) as uow:
            rack = await self.repo.get_active(business_id, rack_id)
            if not rack:
                raise NotFoundError(f"Rack '{rack_id}' not found")
            await self.zones.lock(business_id, rack.zone_id)
            rack = await self.repo.lock(business_id, rack_id)

            live = await self.shelves.count_active(business_id, rack.id)
            soft_delete(rack, live, "shelves", user_id)

            siblings = await self.repo.list_siblings_for_update(business_id, rack.zone_id)
            shifts = close_gap(self.repo.as_siblings(siblings), rack.position, exclude_id=rack.id)
            self.repo.apply_shifts(siblings, shifts, user_id)

            self.audit.record(EntityType.rack, rack, LogType.deleted, user_id, note="Rack deleted")
            self.propagation.schedule(uow, business_id, EntityType.rack.value, rack.id, LogType.deleted.value)
        logger.info(f"rack deleted: business={business_id} id={rack_id} shifted={len(shifts)}")
