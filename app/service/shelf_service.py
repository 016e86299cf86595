import logging
from typing import List
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.domain.codes import require_text
from app.domain.positions import allocate, close_gap, reposition
from app.models.enums import EntityType, LogType
from app.models.shelf import Shelf, shelf_path
from app.repositories.log_repo import LogRepository
from app.repositories.placement_repo import PlacementRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.shelf_repo import ShelfRepository
from app.schemas.shelf import ShelfCreate, ShelfUpdate
from app.service.audit_service import AuditService, diff, snapshot
from app.service.lifecycle_service import soft_delete
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)

UPDATABLE = ("name", "code", "position", "capacity", "coordinates")


class ShelfService:
    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.repo = ShelfRepository(session)
        self.racks = RackRepository(session)
        self.placements = PlacementRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    async def create_shelf(self, business_id: str, user_id: str, data: ShelfCreate) -> Shelf:
        name = require_text(data.name, "Shelf name")

        async with UnitOfWork(self.session) as uow:
            rack = await self.racks.lock(business_id, data.rack_id)
            if not rack or rack.is_deleted:
                raise NotFoundError(f"Rack '{data.rack_id}' not found")
            if data.zone_id and data.zone_id != rack.zone_id:
                raise ValidationError("Given rack does not exist in the given zone")
            if data.warehouse_id and data.warehouse_id != rack.warehouse_id:
                raise ValidationError("Given rack does not exist in the given warehouse")

            siblings = await self.repo.list_siblings_for_update(business_id, rack.id)
            allocation = allocate(self.repo.as_siblings(siblings), data.position)
            self.repo.apply_shifts(siblings, allocation.shifts, user_id)

            shelf = Shelf(
                business_id=business_id,
                id=uuid4().hex,
                name=name,
                code=(data.code or "").strip(),
                capacity=data.capacity,
                coordinates=data.coordinates.model_dump() if data.coordinates else None,
                rack_id=rack.id,
                rack_name=rack.name,
                zone_id=rack.zone_id,
                zone_name=rack.zone_name,
                warehouse_id=rack.warehouse_id,
                warehouse_name=rack.warehouse_name,
                path=shelf_path(rack.zone_name, rack.name, name),
                position=allocation.position,
                created_by=user_id,
                updated_by=user_id,
            )
            self.repo.add(shelf)

            self.audit.record(
                EntityType.shelf, shelf, LogType.created, user_id,
                note=f"Shelf created at position {allocation.position}",
            )
            self.propagation.schedule(uow, business_id, EntityType.shelf.value, shelf.id, LogType.created.value)

        logger.info(
            f"shelf created: business={business_id} id={shelf.id} rack={rack.id} "
            f"position={allocation.position} shifted={len(allocation.shifts)}"
        )
        return shelf

    async def list_shelves(self, business_id: str, rack_id: str) -> List[Shelf]:
        return await self.repo.list_active(business_id, rack_id)

    async def update_shelf(self, business_id: str, user_id: str, shelf_id: str, data: ShelfUpdate) -> Shelf:
        name = require_text(data.name, "Shelf name")

        async with UnitOfWork(self.session) as uow:
            shelf = await self.repo.get_active(business_id, shelf_id)
            if not shelf:
                raise NotFoundError(f"Shelf '{shelf_id}' not found")
            await self.racks.lock(business_id, shelf.rack_id)
            shelf = await self.repo.lock(business_id, shelf_id)

            before = snapshot(shelf, UPDATABLE)
            shelf.name = name
            if data.code is not None:
                shelf.code = data.code.strip()
            if data.capacity is not None:
                shelf.capacity = data.capacity
            if data.coordinates is not None:
                shelf.coordinates = data.coordinates.model_dump()

            # позиция <= 0 или не передана -> оставляем как есть
            if data.position and data.position > 0 and data.position != shelf.position:
                siblings = await self.repo.list_siblings_for_update(business_id, shelf.rack_id)
                shifts = reposition(self.repo.as_siblings(siblings), shelf.id, shelf.position, data.position)
                self.repo.apply_shifts(siblings, shifts, user_id)
                shelf.position = data.position

            changes = diff(before, snapshot(shelf, UPDATABLE), UPDATABLE)
            if not changes:
                return shelf

            if "name" in changes:
                shelf.name_version += 1
                shelf.path = shelf_path(shelf.zone_name, shelf.rack_name, shelf.name)
            shelf.updated_at = utcnow()
            shelf.updated_by = user_id
            self.audit.record(EntityType.shelf, shelf, LogType.updated, user_id, changes=changes)
            if "name" in changes:
                self.propagation.schedule(uow, business_id, EntityType.shelf.value, shelf.id, "renamed")

        logger.info(f"shelf updated: business={business_id} id={shelf_id} fields={sorted(changes)}")
        return shelf

    async def delete_shelf(self, business_id: str, user_id: str, shelf_id: str) -> None:
        async with UnitOfWork(self.session) as uow:
            shelf = await self.repo.get_active(business_id, shelf_id)
            if not shelf:
                raise NotFoundError(f"Shelf '{shelf_id}' not found")
            await self.racks.lock(business_id, shelf.rack_id)
            shelf = await self.repo.lock(business_id, shelf_id)

            stocked = await self.placements.count_stocked_on_shelf(business_id, shelf.id)
            soft_delete(shelf, stocked, "placements", user_id)

            siblings = await self.repo.list_siblings_for_update(business_id, shelf.rack_id)
            shifts = close_gap(self.repo.as_siblings(siblings), shelf.position, exclude_id=shelf.id)
            self.repo.apply_shifts(siblings, shifts, user_id)

            self.audit.record(EntityType.shelf, shelf, LogType.deleted, user_id, note="Shelf deleted")
            self.propagation.schedule(uow, business_id, EntityType.shelf.value, shelf.id, LogType.deleted.value)
        logger.info(f"shelf deleted: business={business_id} id={shelf_id} shifted={len(shifts)}")
