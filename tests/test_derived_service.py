from app.db.unit_of_work import UnitOfWork
from app.schemas.rack import RackMove
from app.schemas.stock import GRNCreate, GRNItem, PutAwayRequest
from app.schemas.zone import ZoneUpdate
from app.service.derived_service import DerivedFieldsService
from tests.helpers import BIZ, USER, DatabaseTestCase


class TestDerivedFields(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.wh_id = (await self.make_warehouse()).id
        await self.make_zone(self.wh_id, code="Z1", name="Cold")
        await self.make_zone(self.wh_id, code="Z2", name="Dry")
        await self.make_rack("Z1", "R1", name="Alpha")
        self.shelf_id = (await self.make_shelf("R1", "Top")).id

    async def refresh(self, entity_type, entity_id):
        async with UnitOfWork(self.session):
            await DerivedFieldsService(self.session).refresh(BIZ, entity_type, entity_id)

    async def stock_one_unit(self):
        grn = await self.stock.create_grn(
            BIZ, USER, GRNCreate(grn_number="G1", items=[GRNItem(sku="sku1", received_qty=1)])
        )
        await self.stock.confirm_put_away(BIZ, USER, grn.id)
        upc_ids = [u.id for u in await self.stock.list_upcs(BIZ, put_away="inbound")]
        await self.stock.put_away(
            BIZ,
            USER,
            PutAwayRequest(
                upc_ids=upc_ids, warehouse_id=self.wh_id, zone_id="Z1", rack_id="R1", shelf_id=self.shelf_id
            ),
        )

    async def test_zone_rename_reaches_shelf_path(self):
        await self.zones.update_zone(BIZ, USER, "Z1", ZoneUpdate(name="Frozen"))
        shelf = (await self.shelves.list_shelves(BIZ, "R1"))[0]
        self.assertEqual(shelf.path, "Cold > Alpha > Top")

        await self.refresh("zone", "Z1")

        shelf = (await self.shelves.list_shelves(BIZ, "R1"))[0]
        self.assertEqual(shelf.zone_name, "Frozen")
        self.assertEqual(shelf.path, "Frozen > Alpha > Top")
        rack = (await self.racks.list_racks(BIZ, "Z1"))[0]
        self.assertEqual(rack.zone_name, "Frozen")

    async def test_rack_move_updates_shelves_and_placements(self):
        await self.stock_one_unit()
        await self.moves.move_rack(BIZ, USER, "R1", RackMove(target_zone_id="Z2"))

        await self.refresh("rack", "R1")

        shelf = (await self.shelves.list_shelves(BIZ, "R1"))[0]
        self.assertEqual((shelf.zone_id, shelf.zone_name), ("Z2", "Dry"))
        self.assertEqual(shelf.path, "Dry > Alpha > Top")

        placement = (await self.stock.list_placements(BIZ, self.shelf_id))[0]
        self.assertEqual((placement.zone_id, placement.zone_name), ("Z2", "Dry"))

    async def test_recount_stats(self):
        await self.make_rack("Z1", "R2")
        await self.make_shelf("R1", "Bottom")
        await self.stock_one_unit()

        await self.refresh("warehouse", self.wh_id)

        warehouse = await self.warehouses.get_warehouse(BIZ, self.wh_id)
        self.assertEqual(
            (warehouse.total_zones, warehouse.total_racks, warehouse.total_shelves, warehouse.total_products),
            (2, 2, 2, 1),
        )
        zones = {z.id: z for z in await self.zones.list_zones(BIZ, self.wh_id)}
        self.assertEqual((zones["Z1"].total_racks, zones["Z1"].total_shelves), (2, 2))
        self.assertEqual((zones["Z2"].total_racks, zones["Z2"].total_products), (0, 0))

        shelves = {s.name: s for s in await self.shelves.list_shelves(BIZ, "R1")}
        self.assertEqual((shelves["Top"].total_products, shelves["Top"].current_occupancy), (1, 1))
        self.assertEqual(shelves["Bottom"].current_occupancy, 0)

    async def test_unknown_entity_is_ignored(self):
        await self.refresh("rack", "missing")
        rack = (await self.racks.list_racks(BIZ, "Z1"))[0]
        self.assertEqual(rack.total_shelves, 1)
