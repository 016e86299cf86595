import unittest

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.api.deps import get_current_user_id
from app.db.base import Base
from app.db.session import get_session
from app.main import app
from app.models.business_member import BusinessMember
from tests.helpers import BIZ, make_engine

PREFIX = f"/api/v1/business/{BIZ}/warehouse"


class ApiTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = make_engine()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.user_id = BIZ

        async def _session():
            async with self.sessionmaker() as session:
                yield session

        app.dependency_overrides[get_session] = _session
        app.dependency_overrides[get_current_user_id] = lambda: self.user_id
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

        resp = await self.client.post(f"{PREFIX}/warehouses", json={"name": "Main", "code": "W1"})
        self.assertEqual(resp.status_code, 201)
        self.wh_id = resp.json()["warehouse"]["id"]

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await self.engine.dispose()

    async def add_member(self, user_id, role, status="active"):
        async with self.sessionmaker() as session:
            session.add(BusinessMember(business_id=BIZ, user_id=user_id, role=role, status=status))
            await session.commit()

    async def create_zone(self, code="A1", name="Aisle 1"):
        return await self.client.post(
            f"{PREFIX}/zones", json={"warehouse_id": self.wh_id, "code": code, "name": name}
        )


class TestZonesApi(ApiTestCase):
    async def test_create_zone(self):
        resp = await self.create_zone(code=" a1 ")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["zone"], {"id": "A1", "code": "A1", "name": "Aisle 1"})

    async def test_duplicate_code_conflict(self):
        await self.create_zone()
        resp = await self.create_zone(name="Other")
        self.assertEqual(resp.status_code, 409)
        self.assertIn("A1", resp.json()["error"])

    async def test_blank_name_rejected(self):
        resp = await self.create_zone(name="   ")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())

    async def test_missing_field_uses_error_envelope(self):
        resp = await self.client.post(f"{PREFIX}/zones", json={"warehouse_id": self.wh_id, "name": "x"})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["error"], "Validation error")
        self.assertTrue(body["details"]["errors"])

    async def test_unknown_warehouse_not_found(self):
        resp = await self.client.post(
            f"{PREFIX}/zones", json={"warehouse_id": "nope", "code": "A1", "name": "x"}
        )
        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.json())

    async def test_list_zones_sorted_by_name(self):
        await self.create_zone(code="B", name="Beta")
        await self.create_zone(code="A", name="Alpha")
        resp = await self.client.get(f"{PREFIX}/zones", params={"warehouse_id": self.wh_id})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([z["name"] for z in resp.json()["zones"]], ["Alpha", "Beta"])


class TestRacksAndShelvesApi(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.create_zone(code="Z1", name="Zone")
        for code in ("R1", "R2"):
            resp = await self.client.post(f"{PREFIX}/racks", json={"zone_id": "Z1", "code": code, "name": code})
            self.assertEqual(resp.status_code, 201)

    async def test_insert_rack_at_position(self):
        resp = await self.client.post(
            f"{PREFIX}/racks", json={"zone_id": "Z1", "code": "R0", "name": "R0", "position": 1}
        )
        self.assertEqual(resp.status_code, 201)
        racks = (await self.client.get(f"{PREFIX}/racks", params={"zone_id": "Z1"})).json()["racks"]
        self.assertEqual([(r["id"], r["position"]) for r in racks], [("R0", 1), ("R1", 2), ("R2", 3)])

    async def test_list_racks_requires_zone(self):
        resp = await self.client.get(f"{PREFIX}/racks")
        self.assertEqual(resp.status_code, 400)

    def move_body(self, rack_id, **extra):
        return {"target_rack_id": rack_id, "target_zone_id": "Z1", "target_warehouse_id": self.wh_id, **extra}

    async def test_move_shelf_to_same_rack_rejected(self):
        resp = await self.client.post(f"{PREFIX}/shelves", json={"rack_id": "R1", "name": "S1"})
        self.assertEqual(resp.status_code, 201)
        shelf_id = resp.json()["shelf"]["id"]

        resp = await self.client.put(f"{PREFIX}/shelves/{shelf_id}/move", json=self.move_body("R1"))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Shelf is already in this rack")

        resp = await self.client.put(f"{PREFIX}/shelves/{shelf_id}/move", json=self.move_body("R2"))
        self.assertEqual(resp.status_code, 200)
        shelves = (await self.client.get(f"{PREFIX}/shelves", params={"rack_id": "R2"})).json()["shelves"]
        self.assertEqual([(s["name"], s["position"]) for s in shelves], [("S1", 1)])

    async def test_move_shelf_without_zone_and_warehouse_rejected(self):
        resp = await self.client.post(f"{PREFIX}/shelves", json={"rack_id": "R1", "name": "S1"})
        shelf_id = resp.json()["shelf"]["id"]

        resp = await self.client.put(f"{PREFIX}/shelves/{shelf_id}/move", json={"target_rack_id": "R2"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Validation error")
        shelves = (await self.client.get(f"{PREFIX}/shelves", params={"rack_id": "R1"})).json()["shelves"]
        self.assertEqual([s["name"] for s in shelves], ["S1"])

    async def test_delete_missing_rack(self):
        resp = await self.client.delete(f"{PREFIX}/racks/R9")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("R9", resp.json()["error"])


class TestAccessApi(ApiTestCase):
    async def test_vendor_can_read_but_not_write(self):
        await self.add_member("vendor-1", "vendor")
        self.user_id = "vendor-1"

        resp = await self.client.get(f"{PREFIX}/warehouses")
        self.assertEqual(resp.status_code, 200)

        resp = await self.create_zone()
        self.assertEqual(resp.status_code, 403)
        self.assertIn("error", resp.json())

    async def test_staff_can_write(self):
        await self.add_member("staff-1", "staff")
        self.user_id = "staff-1"
        resp = await self.create_zone()
        self.assertEqual(resp.status_code, 201)

    async def test_stranger_is_forbidden(self):
        self.user_id = "someone-else"
        resp = await self.client.get(f"{PREFIX}/warehouses")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "You do not have access to this business"})

    async def test_super_admin_has_access(self):
        self.user_id = "super-admin"
        resp = await self.client.get(f"{PREFIX}/warehouses")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["warehouses"]), 1)


class TestInventoryApi(ApiTestCase):
    async def test_grn_confirm_flow(self):
        resp = await self.client.post(
            f"{PREFIX}/grns",
            json={"grn_number": "GRN-1", "items": [{"sku": "sku1", "product_name": "Soap", "received_qty": 2}]},
        )
        self.assertEqual(resp.status_code, 201)
        grn_id = resp.json()["grn"]["id"]

        resp = await self.client.post(f"{PREFIX}/grns/{grn_id}/confirm-put-away")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_upcs_created"], 2)

        resp = await self.client.get(f"{PREFIX}/upcs", params={"put_away": "inbound"})
        self.assertEqual(len(resp.json()["upcs"]), 2)

    async def test_put_away_missing_upcs(self):
        await self.create_zone(code="Z1", name="Zone")
        await self.client.post(f"{PREFIX}/racks", json={"zone_id": "Z1", "code": "R1", "name": "R1"})
        shelf_id = (
            await self.client.post(f"{PREFIX}/shelves", json={"rack_id": "R1", "name": "S1"})
        ).json()["shelf"]["id"]

        resp = await self.client.post(
            f"{PREFIX}/put-away",
            json={
                "upc_ids": ["ghost"],
                "warehouse_id": self.wh_id,
                "zone_id": "Z1",
                "rack_id": "R1",
                "shelf_id": shelf_id,
            },
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["details"], {"missing_upcs": ["ghost"]})

    async def test_logs_require_entity_type_with_id(self):
        resp = await self.client.get(f"{PREFIX}/logs", params={"entity_id": "Z1"})
        self.assertEqual(resp.status_code, 400)

    async def test_grn_update_and_delete(self):
        resp = await self.client.post(
            f"{PREFIX}/grns", json={"grn_number": "GRN-2", "items": [{"sku": "sku1", "received_qty": 1}]}
        )
        grn_id = resp.json()["grn"]["id"]

        resp = await self.client.put(f"{PREFIX}/grns/{grn_id}", json={"status": "completed"})
        self.assertEqual(resp.status_code, 400)

        resp = await self.client.put(f"{PREFIX}/grns/{grn_id}", json={"status": "cancelled", "notes": "wrong truck"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "grn_id": grn_id, "updated_fields": ["notes", "status"]})

        resp = await self.client.delete(f"{PREFIX}/grns/{grn_id}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["deleted_grn_number"], "GRN-2")

        resp = await self.client.delete(f"{PREFIX}/grns/{grn_id}")
        self.assertEqual(resp.status_code, 404)

    async def test_product_placements_with_location_path(self):
        await self.create_zone(code="Z1", name="Zone")
        await self.client.post(f"{PREFIX}/racks", json={"zone_id": "Z1", "code": "R1", "name": "Rack 1"})
        shelf_id = (
            await self.client.post(f"{PREFIX}/shelves", json={"rack_id": "R1", "name": "S1"})
        ).json()["shelf"]["id"]
        grn_id = (
            await self.client.post(
                f"{PREFIX}/grns", json={"grn_number": "GRN-3", "items": [{"sku": "sku1", "received_qty": 2}]}
            )
        ).json()["grn"]["id"]
        await self.client.post(f"{PREFIX}/grns/{grn_id}/confirm-put-away")
        upc_ids = [u["id"] for u in (await self.client.get(f"{PREFIX}/upcs")).json()["upcs"]]
        resp = await self.client.post(
            f"{PREFIX}/put-away",
            json={"upc_ids": upc_ids, "warehouse_id": self.wh_id, "zone_id": "Z1", "rack_id": "R1", "shelf_id": shelf_id},
        )
        self.assertEqual(resp.status_code, 200)

        resp = await self.client.get(f"{PREFIX}/product-placements", params={"product_id": "sku1"})
        self.assertEqual(resp.status_code, 200)
        placements = resp.json()["placements"]
        self.assertEqual([(p["quantity"], p["location_path"]) for p in placements], [(2, "Zone > Rack 1 > S1")])

        resp = await self.client.get(f"{PREFIX}/product-placements")
        self.assertEqual(resp.status_code, 400)

    async def test_logs_filtered_by_type(self):
        await self.create_zone(code="Z1", name="Zone")
        await self.client.put(f"{PREFIX}/zones/Z1", json={"name": "Zone renamed"})

        resp = await self.client.get(f"{PREFIX}/logs", params={"entity_type": "zone", "entity_id": "Z1", "type": "created"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([log["type"] for log in resp.json()["logs"]], ["created"])

        resp = await self.client.get(f"{PREFIX}/logs", params={"type": "vanished"})
        self.assertEqual(resp.status_code, 400)
