import unittest
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db.base import Base
from app.domain.positions import is_dense
from app.schemas.rack import RackCreate
from app.schemas.shelf import ShelfCreate
from app.schemas.warehouse import WarehouseCreate
from app.schemas.zone import ZoneCreate
from app.service.move_service import MoveService
from app.service.propagation_service import PropagationService
from app.service.rack_service import RackService
from app.service.shelf_service import ShelfService
from app.service.stock_service import StockService
from app.service.warehouse_service import WarehouseService
from app.service.zone_service import ZoneService

BIZ = "biz-1"
USER = "biz-1"


def make_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Чистая in-memory БД на каждый тест + сервисы поверх одной сессии."""

    async def asyncSetUp(self):
        self.engine = make_engine()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.session = self.sessionmaker()

        self.propagation = PropagationService()
        self.warehouses = WarehouseService(self.session, self.propagation)
        self.zones = ZoneService(self.session, self.propagation)
        self.racks = RackService(self.session, self.propagation)
        self.shelves = ShelfService(self.session, self.propagation)
        self.moves = MoveService(self.session, self.propagation)
        self.stock = StockService(self.session, self.propagation)

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    # --- seed ---

    async def make_warehouse(self, code="W1", name="Main"):
        return await self.warehouses.create_warehouse(BIZ, USER, WarehouseCreate(name=name, code=code))

    async def make_zone(self, warehouse_id, code="Z1", name="Zone 1"):
        return await self.zones.create_zone(
            BIZ, USER, ZoneCreate(warehouse_id=warehouse_id, code=code, name=name)
        )

    async def make_rack(self, zone_id, code, position: Optional[int] = None, name=None):
        return await self.racks.create_rack(
            BIZ, USER, RackCreate(zone_id=zone_id, code=code, name=name or f"Rack {code}", position=position)
        )

    async def make_shelf(self, rack_id, name, position: Optional[int] = None):
        return await self.shelves.create_shelf(
            BIZ, USER, ShelfCreate(rack_id=rack_id, name=name, position=position)
        )

    # --- проверки ---

    async def rack_order(self, zone_id) -> List[tuple]:
        return [(r.id, r.position) for r in await self.racks.list_racks(BIZ, zone_id)]

    async def shelf_order(self, rack_id) -> List[tuple]:
        return [(s.name, s.position) for s in await self.shelves.list_shelves(BIZ, rack_id)]

    def assertDense(self, pairs):
        self.assertTrue(is_dense([p for _, p in pairs]), f"positions not dense: {pairs}")
