"""
Tests for moving shelves between racks and racks between zones.
"""
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import NotFoundError, ValidationError
from app.schemas.rack import RackMove
from app.schemas.shelf import ShelfMove
from app.service.history_service import HistoryService
from tests.helpers import BIZ, USER, DatabaseTestCase


class TestMoveShelf(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.wh_id = (await self.make_warehouse()).id
        await self.make_zone(self.wh_id)
        await self.make_rack("Z1", "R1")
        await self.make_rack("Z1", "R2")
        self.ids = {}
        for name in ("A1", "A2", "A3"):
            self.ids[name] = (await self.make_shelf("R1", name)).id
        for name in ("B1", "B2"):
            self.ids[name] = (await self.make_shelf("R2", name)).id

    def to_rack(self, rack_id, **kwargs):
        kwargs.setdefault("target_zone_id", "Z1")
        kwargs.setdefault("target_warehouse_id", self.wh_id)
        return ShelfMove(target_rack_id=rack_id, **kwargs)

    async def test_move_appends_to_target_and_closes_source_gap(self):
        await self.moves.move_shelf(BIZ, USER, self.ids["A2"], self.to_rack("R2"))

        self.assertEqual(await self.shelf_order("R1"), [("A1", 1), ("A3", 2)])
        self.assertEqual(await self.shelf_order("R2"), [("B1", 1), ("B2", 2), ("A2", 3)])

    async def test_move_with_target_position_inserts(self):
        shelf = await self.moves.move_shelf(
            BIZ, USER, self.ids["A1"], self.to_rack("R2", target_position=1)
        )
        self.assertEqual(shelf.rack_id, "R2")
        self.assertEqual(shelf.location_version, 2)

        source = await self.shelf_order("R1")
        target = await self.shelf_order("R2")
        self.assertEqual(target, [("A1", 1), ("B1", 2), ("B2", 3)])
        self.assertDense(source)
        self.assertEqual(len(source), 2)

    async def test_move_to_same_rack_is_rejected_without_writes(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.moves.move_shelf(BIZ, USER, self.ids["A2"], self.to_rack("R1"))
        self.assertIn("already in this rack", ctx.exception.message)
        self.assertEqual(await self.shelf_order("R1"), [("A1", 1), ("A2", 2), ("A3", 3)])

        logs = await HistoryService(self.session).list_logs(BIZ, "shelf", self.ids["A2"])
        self.assertEqual([log.type for log in logs], ["created"])

    async def test_missing_target_rack(self):
        with self.assertRaises(NotFoundError):
            await self.moves.move_shelf(BIZ, USER, self.ids["A2"], self.to_rack("R9"))
        self.assertEqual(len(await self.shelf_order("R1")), 3)

    async def test_target_zone_mismatch_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.moves.move_shelf(BIZ, USER, self.ids["A2"], self.to_rack("R2", target_zone_id="Z9"))
        self.assertIn("given zone", ctx.exception.message)
        self.assertEqual(len(await self.shelf_order("R2")), 2)

    async def test_target_warehouse_mismatch_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.moves.move_shelf(
                BIZ, USER, self.ids["A2"], self.to_rack("R2", target_warehouse_id="elsewhere")
            )
        self.assertIn("given warehouse", ctx.exception.message)
        self.assertEqual(len(await self.shelf_order("R1")), 3)

    def test_zone_and_warehouse_are_required(self):
        with self.assertRaises(PydanticValidationError):
            ShelfMove(target_rack_id="R2")
        with self.assertRaises(PydanticValidationError):
            ShelfMove(target_rack_id="R2", target_zone_id="Z1", target_warehouse_id="")

    async def test_move_writes_log_with_locations(self):
        await self.moves.move_shelf(BIZ, USER, self.ids["A3"], self.to_rack("R2"))
        logs = await HistoryService(self.session).list_logs(BIZ, "shelf", self.ids["A3"])
        moved = [log for log in logs if log.type == "moved"][0]
        self.assertEqual(moved.from_location["rack_id"], "R1")
        self.assertEqual(moved.to_location["rack_id"], "R2")
        self.assertEqual(moved.to_location["position"], 3)


class TestMoveRack(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        wh_id = (await self.make_warehouse()).id
        await self.make_zone(wh_id, code="Z1", name="Left")
        await self.make_zone(wh_id, code="Z2", name="Right")
        for code in ("R1", "R2", "R3"):
            await self.make_rack("Z1", code)
        await self.make_rack("Z2", "Q1")

    async def test_move_rack_between_zones(self):
        rack = await self.moves.move_rack(BIZ, USER, "R1", RackMove(target_zone_id="Z2", target_position=1))
        self.assertEqual(rack.zone_name, "Right")
        self.assertEqual(await self.rack_order("Z1"), [("R2", 1), ("R3", 2)])
        self.assertEqual(await self.rack_order("Z2"), [("R1", 1), ("Q1", 2)])

    async def test_move_rack_to_same_zone_rejected(self):
        with self.assertRaises(ValidationError):
            await self.moves.move_rack(BIZ, USER, "R1", RackMove(target_zone_id="Z1"))
        self.assertEqual(await self.rack_order("Z1"), [("R1", 1), ("R2", 2), ("R3", 3)])
