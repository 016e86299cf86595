# app/service/move_service.py
"""
Перенос полки между стеллажами (и стеллажа между зонами).

Всё в одной единице работы:
  1. блокируем оба родителя (в порядке id, чтобы не словить deadlock);
  2. закрываем дырку в исходном родителе;
  3. раздвигаем соседей в целевом (или ставим в конец);
  4. пишем новые parent id + position узла и лог "moved";
  5. один commit, затем пересчёт денормализованных полей вне запроса.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.domain.positions import allocate, close_gap
from app.models.enums import EntityType, LogType
from app.models.rack import Rack
from app.models.shelf import Shelf
from app.repositories.log_repo import LogRepository
from app.repositories.node_repo import NodeRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.shelf_repo import ShelfRepository
from app.repositories.zone_repo import ZoneRepository
from app.schemas.rack import RackMove
from app.schemas.shelf import ShelfMove
from app.service.audit_service import AuditService
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)


async def _lock_parents(repo: NodeRepository, business_id: str, source_id: str, target_id: str):
    locked = {}
    for parent_id in sorted({source_id, target_id}):
        locked[parent_id] = await repo.lock(business_id, parent_id)
    return locked[source_id], locked[target_id]


class MoveService:
    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.shelves = ShelfRepository(session)
        self.racks = RackRepository(session)
        self.zones = ZoneRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    async def move_shelf(self, business_id: str, user_id: str, shelf_id: str, data: ShelfMove) -> Shelf:
        async with UnitOfWork(self.session) as uow:
            shelf = await self.shelves.get_active(business_id, shelf_id)
            if not shelf:
                raise NotFoundError(f"Shelf '{shelf_id}' not found")
            if shelf.rack_id == data.target_rack_id:
                raise ValidationError("Shelf is already in this rack")

            _, target = await _lock_parents(self.racks, business_id, shelf.rack_id, data.target_rack_id)
            if not target or target.is_deleted:
                raise NotFoundError(f"Rack '{data.target_rack_id}' not found")
            if data.target_zone_id != target.zone_id:
                raise ValidationError("Given rack does not exist in the given zone")
            if data.target_warehouse_id != target.warehouse_id:
                raise ValidationError("Given rack does not exist in the given warehouse")

            shelf = await self.shelves.lock(business_id, shelf_id)
            source_rack_id, old_position = shelf.rack_id, shelf.position

            source_siblings = await self.shelves.list_siblings_for_update(business_id, source_rack_id)
            source_shifts = close_gap(self.shelves.as_siblings(source_siblings), old_position, exclude_id=shelf.id)

            target_siblings = await self.shelves.list_siblings_for_update(business_id, target.id)
            allocation = allocate(self.shelves.as_siblings(target_siblings), data.target_position)

            self.shelves.apply_shifts(source_siblings, source_shifts, user_id)
            self.shelves.apply_shifts(target_siblings, allocation.shifts, user_id)

            from_location = {
                "rack_id": shelf.rack_id, "rack_name": shelf.rack_name,
                "zone_id": shelf.zone_id, "warehouse_id": shelf.warehouse_id,
                "position": old_position,
            }
            shelf.rack_id = target.id
            shelf.zone_id = target.zone_id
            shelf.warehouse_id = target.warehouse_id
            shelf.position = allocation.position
            shelf.location_version += 1
            shelf.updated_at = utcnow()
            shelf.updated_by = user_id
            to_location = {
                "rack_id": target.id, "rack_name": target.name,
                "zone_id": target.zone_id, "warehouse_id": target.warehouse_id,
                "position": allocation.position,
            }

            self.audit.record(
                EntityType.shelf, shelf, LogType.moved, user_id,
                from_location=from_location, to_location=to_location,
                note=f"Shelf moved to rack {target.name}",
            )
            self.propagation.schedule(uow, business_id, EntityType.shelf.value, shelf.id, LogType.moved.value)

        logger.info(
            f"shelf moved: business={business_id} id={shelf_id} {source_rack_id}:{old_position} -> "
            f"{target.id}:{allocation.position} shifted={len(source_shifts) + len(allocation.shifts)}"
        )
        return shelf

    async def move_rack(self, business_id: str, user_id: str, rack_id: str, data: RackMove) -> Rack:
        async with UnitOfWork(self.session) as uow:
            rack = await self.racks.get_active(business_id, rack_id)
            if not rack:
                raise NotFoundError(f"Rack '{rack_id}' not found")
            if rack.zone_id == data.target_zone_id:
                raise ValidationError("Rack is already in this zone")

            _, target = await _lock_parents(self.zones, business_id, rack.zone_id, data.target_zone_id)
            if not target or target.is_deleted:
                raise NotFoundError(f"Zone '{data.target_zone_id}' not found")
            if data.target_warehouse_id and data.target_warehouse_id != target.warehouse_id:
                raise ValidationError("Given zone does not exist in the given warehouse")

            rack = await self.racks.lock(business_id, rack_id)
            source_zone_id, old_position = rack.zone_id, rack.position

            source_siblings = await self.racks.list_siblings_for_update(business_id, source_zone_id)
            source_shifts = close_gap(self.racks.as_siblings(source_siblings), old_position, exclude_id=rack.id)

            target_siblings = await self.racks.list_siblings_for_update(business_id, target.id)
            allocation = allocate(self.racks.as_siblings(target_siblings), data.target_position)

            self.racks.apply_shifts(source_siblings, source_shifts, user_id)
            self.racks.apply_shifts(target_siblings, allocation.shifts, user_id)

            from_location = {
                "zone_id": rack.zone_id, "zone_name": rack.zone_name,
                "warehouse_id": rack.warehouse_id, "position": old_position,
            }
            rack.zone_id = target.id
            rack.zone_name = target.name
            rack.warehouse_id = target.warehouse_id
            rack.warehouse_name = target.warehouse_name
            rack.position = allocation.position
            rack.location_version += 1
            rack.updated_at = utcnow()
            rack.updated_by = user_id
            to_location = {
                "zone_id": target.id, "zone_name": target.name,
                "warehouse_id": target.warehouse_id, "position": allocation.position,
            }

            self.audit.record(
                EntityType.rack, rack, LogType.moved, user_id,
                from_location=from_location, to_location=to_location,
                note=f"Rack moved to zone {target.name}",
            )
            # полки стеллажа получат новые zone_id/warehouse_id через пересчёт
            self.propagation.schedule(uow, business_id, EntityType.rack.value, rack.id, LogType.moved.value)

        logger.info(
            f"rack moved: business={business_id} id={rack_id} {source_zone_id}:{old_position} -> "
            f"{target.id}:{allocation.position}"
        )
        return rack
