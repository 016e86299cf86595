# app/service/derived_service.py
"""
Пересчёт денормализованных полей: имена предков, ancestor ids, path полок
и счётчики total_*. Запускается воркером по событию hierarchy.changed,
никогда не внутри пользовательского запроса.
"""
import logging
from typing import Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.placement import Placement
from app.models.rack import Rack
from app.models.shelf import Shelf, shelf_path
from app.models.warehouse import Warehouse
from app.models.zone import Zone
from app.models.enums import EntityType
from app.repositories.placement_repo import PlacementRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.shelf_repo import ShelfRepository
from app.repositories.warehouse_repo import WarehouseRepository
from app.repositories.zone_repo import ZoneRepository

logger = logging.getLogger(__name__)


class DerivedFieldsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.warehouses = WarehouseRepository(session)
        self.zones = ZoneRepository(session)
        self.racks = RackRepository(session)
        self.shelves = ShelfRepository(session)
        self.placements = PlacementRepository(session)

    async def refresh(self, business_id: str, entity_type: str, entity_id: str) -> None:
        if entity_type == EntityType.warehouse.value:
            warehouse = await self.warehouses.get(business_id, entity_id)
            if warehouse:
                await self._refresh_warehouse(warehouse)
        elif entity_type == EntityType.zone.value:
            zone = await self.zones.get(business_id, entity_id)
            if zone:
                await self._refresh_zone(zone)
        elif entity_type == EntityType.rack.value:
            rack = await self.racks.get(business_id, entity_id)
            if rack:
                await self._refresh_rack(rack)
        elif entity_type == EntityType.shelf.value:
            shelf = await self.shelves.get(business_id, entity_id)
            if shelf:
                await self._refresh_shelf(shelf)
        else:
            logger.warning(f"unknown entity type in propagation event: {entity_type}")

        await self.recount_stats(business_id)

    # --- имена и ancestor ids, сверху вниз ---

    async def _refresh_warehouse(self, warehouse: Warehouse) -> None:
        for zone in await self.zones.list_active(warehouse.business_id, warehouse.id):
            await self._refresh_zone(zone, warehouse)

    async def _refresh_zone(self, zone: Zone, warehouse: Optional[Warehouse] = None) -> None:
        warehouse = warehouse or await self.warehouses.get(zone.business_id, zone.warehouse_id)
        if warehouse:
            zone.warehouse_name = warehouse.name
        for rack in await self.racks.list_active(zone.business_id, zone.id):
            await self._refresh_rack(rack, zone)

    async def _refresh_rack(self, rack: Rack, zone: Optional[Zone] = None) -> None:
        zone = zone or await self.zones.get(rack.business_id, rack.zone_id)
        if zone:
            rack.zone_name = zone.name
            rack.warehouse_id = zone.warehouse_id
            rack.warehouse_name = zone.warehouse_name
        for shelf in await self.shelves.list_active(rack.business_id, rack.id):
            await self._refresh_shelf(shelf, rack)

    async def _refresh_shelf(self, shelf: Shelf, rack: Optional[Rack] = None) -> None:
        rack = rack or await self.racks.get(shelf.business_id, shelf.rack_id)
        if rack:
            shelf.rack_name = rack.name
            shelf.zone_id = rack.zone_id
            shelf.zone_name = rack.zone_name
            shelf.warehouse_id = rack.warehouse_id
            shelf.warehouse_name = rack.warehouse_name
        shelf.path = shelf_path(shelf.zone_name, shelf.rack_name, shelf.name)

        await self.placements.update_location(
            shelf.business_id,
            shelf.id,
            shelf_name=shelf.name,
            rack_id=shelf.rack_id,
            rack_name=shelf.rack_name,
            zone_id=shelf.zone_id,
            zone_name=shelf.zone_name,
            warehouse_id=shelf.warehouse_id,
            warehouse_name=shelf.warehouse_name,
        )

    # --- счётчики ---

    async def _count_by(self, business_id: str, model, column) -> Dict[str, int]:
        result = await self.session.execute(
            select(column, func.count())
            .where(model.business_id == business_id, model.is_deleted.is_(False))
            .group_by(column)
        )
        return {key: int(n) for key, n in result.all()}

    async def _stock_by(self, business_id: str, column) -> Dict[str, tuple]:
        result = await self.session.execute(
            select(column, func.count(), func.coalesce(func.sum(Placement.quantity), 0))
            .where(Placement.business_id == business_id, Placement.quantity > 0)
            .group_by(column)
        )
        return {key: (int(n), int(q)) for key, n, q in result.all()}

    async def recount_stats(self, business_id: str) -> None:
        await self.session.flush()

        zones_by_wh = await self._count_by(business_id, Zone, Zone.warehouse_id)
        racks_by_wh = await self._count_by(business_id, Rack, Rack.warehouse_id)
        racks_by_zone = await self._count_by(business_id, Rack, Rack.zone_id)
        shelves_by_wh = await self._count_by(business_id, Shelf, Shelf.warehouse_id)
        shelves_by_zone = await self._count_by(business_id, Shelf, Shelf.zone_id)
        shelves_by_rack = await self._count_by(business_id, Shelf, Shelf.rack_id)

        stock = {
            "warehouse": await self._stock_by(business_id, Placement.warehouse_id),
            "zone": await self._stock_by(business_id, Placement.zone_id),
            "rack": await self._stock_by(business_id, Placement.rack_id),
            "shelf": await self._stock_by(business_id, Placement.shelf_id),
        }

        for w in await self.warehouses.list_active(business_id):
            w.total_zones = zones_by_wh.get(w.id, 0)
            w.total_racks = racks_by_wh.get(w.id, 0)
            w.total_shelves = shelves_by_wh.get(w.id, 0)
            w.total_products = stock["warehouse"].get(w.id, (0, 0))[0]

        for z in await self.zones.list_active(business_id):
            z.total_racks = racks_by_zone.get(z.id, 0)
            z.total_shelves = shelves_by_zone.get(z.id, 0)
            z.total_products = stock["zone"].get(z.id, (0, 0))[0]

        for r in await self.racks.list_active(business_id):
            r.total_shelves = shelves_by_rack.get(r.id, 0)
            r.total_products = stock["rack"].get(r.id, (0, 0))[0]

        for s in await self.shelves.list_active(business_id):
            products, units = stock["shelf"].get(s.id, (0, 0))
            s.total_products = products
            s.current_occupancy = units
