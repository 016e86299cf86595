"""
Tests for warehouse/zone/rack/shelf services on an in-memory database.
"""
from unittest.mock import AsyncMock

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.warehouse import Warehouse
from app.schemas.rack import RackCreate, RackUpdate
from app.schemas.shelf import ShelfUpdate
from app.schemas.warehouse import WarehouseCreate, WarehouseUpdate
from app.schemas.zone import ZoneCreate, ZoneMove, ZoneUpdate
from app.service.history_service import HistoryService
from tests.helpers import BIZ, USER, DatabaseTestCase


class TestWarehouseService(DatabaseTestCase):
    async def test_create_normalizes_code(self):
        warehouse = await self.make_warehouse(code=" w1 ")
        self.assertEqual(warehouse.code, "W1")
        self.assertEqual(len(warehouse.id), 32)

    async def test_duplicate_active_code_conflicts(self):
        await self.make_warehouse(code="W1")
        with self.assertRaises(ConflictError) as ctx:
            await self.make_warehouse(code="w1")
        self.assertIn("W1", ctx.exception.message)

    async def test_code_taken_between_check_and_insert_conflicts(self):
        # другая сессия закоммитила W1 уже после нашей проверки кода
        async with self.sessionmaker() as other:
            other.add(Warehouse(business_id=BIZ, id="other-w1", name="Other", code="W1"))
            await other.commit()
        self.warehouses.repo.find_by_code = AsyncMock(return_value=[])

        with self.assertRaises(ConflictError) as ctx:
            await self.make_warehouse(code="W1")
        self.assertIn("W1", ctx.exception.message)
        self.assertEqual([w.id for w in await self.warehouses.list_warehouses(BIZ)], ["other-w1"])

    async def test_blank_name_rejected(self):
        with self.assertRaises(ValidationError):
            await self.warehouses.create_warehouse(BIZ, USER, WarehouseCreate(name="   ", code="W9"))

    async def test_delete_blocked_by_active_zone(self):
        wh_id = (await self.make_warehouse()).id
        await self.make_zone(wh_id)
        with self.assertRaises(ValidationError):
            await self.warehouses.delete_warehouse(BIZ, USER, wh_id)
        self.assertEqual(len(await self.warehouses.list_warehouses(BIZ)), 1)

    async def test_recreate_deleted_code_reuses_document(self):
        wh_id = (await self.make_warehouse(code="W1", name="Old")).id
        await self.warehouses.delete_warehouse(BIZ, USER, wh_id)
        self.assertEqual(await self.warehouses.list_warehouses(BIZ), [])

        again = await self.make_warehouse(code="W1", name="New")
        self.assertEqual(again.id, wh_id)
        self.assertEqual(again.name, "New")
        self.assertFalse(again.is_deleted)

    async def test_update_writes_diff_log(self):
        wh_id = (await self.make_warehouse(name="Main")).id
        await self.warehouses.update_warehouse(BIZ, USER, wh_id, WarehouseUpdate(name="North", storage_capacity=10))

        logs = await HistoryService(self.session).list_logs(BIZ, "warehouse", wh_id)
        updated = [log for log in logs if log.type == "updated"]
        self.assertEqual(len(updated), 1)
        self.assertEqual(updated[0].changes["name"], {"from": "Main", "to": "North"})
        self.assertEqual(updated[0].changes["storage_capacity"], {"from": 0, "to": 10})


class TestZoneService(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.wh_id = (await self.make_warehouse()).id

    async def test_duplicate_zone_code_returns_conflict_naming_code(self):
        data = ZoneCreate(warehouse_id=self.wh_id, code="A1", name="Aisle 1")
        await self.zones.create_zone(BIZ, USER, data)
        with self.assertRaises(ConflictError) as ctx:
            await self.zones.create_zone(BIZ, USER, data)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertIn("A1", ctx.exception.message)

    async def test_code_is_trimmed_and_uppercased(self):
        zone = await self.make_zone(self.wh_id, code="z1 ")
        self.assertEqual(zone.id, "Z1")
        self.assertEqual(zone.code, "Z1")

    async def test_zone_takes_warehouse_name_from_parent(self):
        zone = await self.make_zone(self.wh_id)
        self.assertEqual(zone.warehouse_name, "Main")

    async def test_missing_warehouse_is_not_found(self):
        with self.assertRaises(NotFoundError):
            await self.make_zone("nope")

    async def test_list_is_ordered_by_name(self):
        await self.make_zone(self.wh_id, code="Z2", name="Beta")
        await self.make_zone(self.wh_id, code="Z1", name="Alpha")
        names = [z.name for z in await self.zones.list_zones(BIZ, self.wh_id)]
        self.assertEqual(names, ["Alpha", "Beta"])

    async def test_delete_blocked_by_active_rack(self):
        await self.make_zone(self.wh_id)
        await self.make_rack("Z1", "R1")
        with self.assertRaises(ValidationError):
            await self.zones.delete_zone(BIZ, USER, "Z1")
        self.assertEqual([z.id for z in await self.zones.list_zones(BIZ, self.wh_id)], ["Z1"])

    async def test_soft_deleted_code_is_reactivated_with_reset_stats(self):
        zone = await self.make_zone(self.wh_id, name="First")
        zone.total_products = 42
        await self.session.commit()
        await self.zones.delete_zone(BIZ, USER, "Z1")

        again = await self.make_zone(self.wh_id, code="z1", name="Second")
        self.assertEqual(again.id, "Z1")
        self.assertEqual(again.name, "Second")
        self.assertEqual(again.total_products, 0)

        logs = await HistoryService(self.session).list_logs(BIZ, "zone", "Z1")
        self.assertEqual(sorted(log.type for log in logs), ["created", "deleted", "restored"])

    async def test_update_rename_bumps_name_version(self):
        await self.make_zone(self.wh_id, name="Old")
        zone = await self.zones.update_zone(BIZ, USER, "Z1", ZoneUpdate(name="New"))
        self.assertEqual(zone.name, "New")
        self.assertEqual(zone.name_version, 2)

    async def test_move_to_same_warehouse_rejected(self):
        await self.make_zone(self.wh_id)
        with self.assertRaises(ValidationError):
            await self.zones.move_zone(BIZ, USER, "Z1", ZoneMove(target_warehouse_id=self.wh_id))

    async def test_move_to_other_warehouse(self):
        other_id = (await self.make_warehouse(code="W2", name="Second")).id
        await self.make_zone(self.wh_id)
        zone = await self.zones.move_zone(BIZ, USER, "Z1", ZoneMove(target_warehouse_id=other_id))
        self.assertEqual(zone.warehouse_id, other_id)
        self.assertEqual(zone.warehouse_name, "Second")
        self.assertEqual(zone.location_version, 2)


class TestRackService(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        wh_id = (await self.make_warehouse()).id
        await self.make_zone(wh_id)

    async def test_append_assigns_max_plus_one(self):
        first = await self.make_rack("Z1", "R1")
        second = await self.make_rack("Z1", "R2")
        self.assertEqual((first.position, second.position), (1, 2))

    async def test_insert_at_shifts_following_racks(self):
        await self.make_rack("Z1", "R1")
        await self.make_rack("Z1", "R2")
        await self.make_rack("Z1", "R3", position=2)
        self.assertEqual(await self.rack_order("Z1"), [("R1", 1), ("R3", 2), ("R2", 3)])

    async def test_duplicate_active_code_conflicts(self):
        await self.make_rack("Z1", "R1")
        with self.assertRaises(ConflictError):
            await self.make_rack("Z1", " r1")
        self.assertEqual(await self.rack_order("Z1"), [("R1", 1)])

    async def test_warehouse_mismatch_rejected(self):
        with self.assertRaises(ValidationError):
            await self.racks.create_rack(
                BIZ, USER, RackCreate(zone_id="Z1", warehouse_id="other", code="R1", name="R")
            )

    async def test_delete_blocked_by_active_shelf(self):
        await self.make_rack("Z1", "R1")
        shelf_id = (await self.make_shelf("R1", "S1")).id
        with self.assertRaises(ValidationError):
            await self.racks.delete_rack(BIZ, USER, "R1")
        self.assertEqual(await self.rack_order("Z1"), [("R1", 1)])
        shelves = await self.shelves.list_shelves(BIZ, "R1")
        self.assertEqual([s.id for s in shelves], [shelf_id])

    async def test_delete_closes_gap(self):
        for code in ("R1", "R2", "R3"):
            await self.make_rack("Z1", code)
        await self.racks.delete_rack(BIZ, USER, "R2")
        self.assertEqual(await self.rack_order("Z1"), [("R1", 1), ("R3", 2)])

    async def test_reactivated_rack_gets_fresh_position(self):
        await self.make_rack("Z1", "R1")
        await self.make_rack("Z1", "R2")
        await self.racks.delete_rack(BIZ, USER, "R1")
        rack = await self.make_rack("Z1", "R1")
        self.assertEqual(rack.position, 2)
        self.assertEqual(await self.rack_order("Z1"), [("R2", 1), ("R1", 2)])

    async def test_update_position_repositions_siblings(self):
        for code in ("R1", "R2", "R3"):
            await self.make_rack("Z1", code)
        await self.racks.update_rack(BIZ, USER, "R3", RackUpdate(name="Rack R3", position=1))
        self.assertEqual(await self.rack_order("Z1"), [("R3", 1), ("R1", 2), ("R2", 3)])

    async def test_update_without_position_keeps_it(self):
        await self.make_rack("Z1", "R1")
        await self.make_rack("Z1", "R2")
        rack = await self.racks.update_rack(BIZ, USER, "R2", RackUpdate(name="Renamed", position=0))
        self.assertEqual(rack.position, 2)
        self.assertEqual(rack.name, "Renamed")

    async def test_density_after_mixed_operations(self):
        for code in ("R1", "R2", "R3", "R4"):
            await self.make_rack("Z1", code)
        await self.make_rack("Z1", "R5", position=1)
        await self.racks.delete_rack(BIZ, USER, "R3")
        await self.racks.update_rack(BIZ, USER, "R1", RackUpdate(name="Rack R1", position=4))
        await self.make_rack("Z1", "R6", position=3)
        order = await self.rack_order("Z1")
        self.assertEqual(len(order), 5)
        self.assertDense(order)


class TestShelfService(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        wh_id = (await self.make_warehouse()).id
        await self.make_zone(wh_id)
        await self.make_rack("Z1", "R1", name="Rack A")

    async def test_create_fills_ancestors_and_path(self):
        shelf = await self.make_shelf("R1", "Top")
        self.assertEqual(shelf.position, 1)
        self.assertEqual(shelf.zone_id, "Z1")
        self.assertEqual(shelf.rack_name, "Rack A")
        self.assertEqual(shelf.path, "Zone 1 > Rack A > Top")

    async def test_missing_rack_is_not_found(self):
        with self.assertRaises(NotFoundError):
            await self.make_shelf("R404", "S")

    async def test_delete_middle_shelf_keeps_relative_order(self):
        ids = {}
        for name in ("S1", "S2", "S3", "S4", "S5"):
            ids[name] = (await self.make_shelf("R1", name)).id
        await self.shelves.delete_shelf(BIZ, USER, ids["S3"])
        self.assertEqual(
            await self.shelf_order("R1"),
            [("S1", 1), ("S2", 2), ("S4", 3), ("S5", 4)],
        )

    async def test_update_position_and_capacity(self):
        ids = {}
        for name in ("S1", "S2", "S3"):
            ids[name] = (await self.make_shelf("R1", name)).id
        shelf = await self.shelves.update_shelf(
            BIZ, USER, ids["S1"], ShelfUpdate(name="S1", position=3, capacity=40)
        )
        self.assertEqual(shelf.capacity, 40)
        self.assertEqual(await self.shelf_order("R1"), [("S2", 1), ("S3", 2), ("S1", 3)])

        logs = await HistoryService(self.session).list_logs(BIZ, "shelf", ids["S1"])
        updated = [log for log in logs if log.type == "updated"][0]
        self.assertEqual(updated.changes["position"], {"from": 1, "to": 3})
        self.assertEqual(updated.changes["capacity"], {"from": None, "to": 40})
