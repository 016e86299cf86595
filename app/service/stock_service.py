import logging
from collections import OrderedDict
from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, ValidationError, integrity_to_error
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.domain.codes import require_text
from app.models.enums import EntityType, GRNStatus, LogType, MovementType, PutAwayState
from app.models.grn import GRN
from app.models.movement import Movement, empty_location
from app.models.placement import Placement, placement_id
from app.models.upc import UPC
from app.repositories.grn_repo import GRNRepository
from app.repositories.log_repo import LogRepository
from app.repositories.movement_repo import MovementRepository
from app.repositories.placement_repo import PlacementRepository
from app.repositories.rack_repo import RackRepository
from app.repositories.shelf_repo import ShelfRepository
from app.repositories.upc_repo import UPCRepository
from app.repositories.warehouse_repo import WarehouseRepository
from app.repositories.zone_repo import ZoneRepository
from app.schemas.stock import GRNCreate, GRNUpdate, PutAwayRequest
from app.service.audit_service import AuditService
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)

PUT_AWAY_REASON = "put_away"

# completed ставит только confirm-put-away: он же создаёт UPC
GRN_TRANSITIONS = {
    GRNStatus.draft.value: (GRNStatus.cancelled.value,),
}
DELETABLE_GRN_STATUSES = (GRNStatus.draft.value, GRNStatus.cancelled.value)


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit <= 0:
        return settings.LIST_LIMIT_DEFAULT
    return min(limit, settings.LIST_LIMIT_MAX)


class StockService:
    """Приёмка (GRN -> UPC) и раскладка UPC по полкам с учётом размещений."""

    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.grns = GRNRepository(session)
        self.upcs = UPCRepository(session)
        self.placements = PlacementRepository(session)
        self.movements = MovementRepository(session)
        self.warehouses = WarehouseRepository(session)
        self.zones = ZoneRepository(session)
        self.racks = RackRepository(session)
        self.shelves = ShelfRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    # --- GRN ---

    async def create_grn(self, business_id: str, user_id: str, data: GRNCreate) -> GRN:
        number = require_text(data.grn_number, "GRN number")
        try:
            async with UnitOfWork(self.session):
                if await self.grns.find_by_number(business_id, number):
                    raise ConflictError(f'GRN "{number}" already exists', details={"grn_number": number})
                grn = GRN(
                    business_id=business_id,
                    id=uuid4().hex,
                    grn_number=number,
                    status=GRNStatus.draft.value,
                    items=[item.model_dump() for item in data.items],
                    created_by=user_id,
                    updated_by=user_id,
                )
                self.grns.add(grn)
        except IntegrityError as e:
            raise integrity_to_error(e, f'GRN "{number}" already exists')
        return grn

    async def confirm_put_away(self, business_id: str, user_id: str, grn_id: str) -> dict:
        async with UnitOfWork(self.session):
            grn = await self.grns.get_for_update(business_id, grn_id)
            if not grn:
                raise NotFoundError("GRN not found")
            if grn.status != GRNStatus.draft.value:
                raise ValidationError(
                    f"GRN is already '{grn.status}'. Only draft GRNs can be confirmed for put away."
                )

            received = [item for item in grn.items or [] if int(item.get("received_qty") or 0) > 0]
            total = sum(int(item["received_qty"]) for item in received)
            if total == 0:
                raise ValidationError("No items with received quantity > 0 to create UPCs for.")

            now = utcnow()
            upcs: List[UPC] = []
            summary = []
            for item in received:
                qty = int(item["received_qty"])
                for _ in range(qty):
                    upcs.append(
                        UPC(
                            business_id=business_id,
                            id=uuid4().hex,
                            product_id=item["sku"],
                            put_away=PutAwayState.inbound.value,
                            grn_ref=grn.id,
                            created_at=now,
                            updated_at=now,
                            created_by=user_id,
                            updated_by=user_id,
                        )
                    )
                summary.append({"sku": item["sku"], "product_name": item.get("product_name") or "", "upcs_created": qty})
            self.upcs.add_all(upcs)

            grn.status = GRNStatus.completed.value
            grn.completed_at = now
            grn.completed_by = user_id
            grn.total_upcs_created = total
            grn.updated_at = now
            grn.updated_by = user_id

        logger.info(f"grn confirmed: business={business_id} grn={grn_id} upcs={total}")
        return {
            "success": True,
            "grn_id": grn.id,
            "grn_number": grn.grn_number,
            "grn_status": grn.status,
            "total_upcs_created": total,
            "items": summary,
        }

    async def update_grn(self, business_id: str, user_id: str, grn_id: str, data: GRNUpdate) -> dict:
        if data.items:
            skus = [item.sku for item in data.items]
            duplicates = sorted({sku for sku in skus if skus.count(sku) > 1})
            if duplicates:
                raise ValidationError(
                    f"Duplicate SKUs found in GRN items: {', '.join(duplicates)}. Each product can only appear once."
                )

        async with UnitOfWork(self.session):
            grn = await self.grns.get_for_update(business_id, grn_id)
            if not grn:
                raise NotFoundError("GRN not found")

            if data.status is not None and data.status not in GRN_TRANSITIONS.get(grn.status, ()):
                raise ValidationError(f"Cannot transition from '{grn.status}' to '{data.status}'")
            if data.items is not None and grn.status != GRNStatus.draft.value:
                raise ValidationError("Cannot modify items on a GRN that is not in draft status")

            updated: List[str] = []
            if data.notes is not None:
                grn.notes = data.notes.strip() or None
                updated.append("notes")
            if data.items is not None:
                grn.items = [item.model_dump() for item in data.items]
                updated.append("items")
            if data.status is not None:
                grn.status = data.status
                updated.append("status")
            grn.updated_at = utcnow()
            grn.updated_by = user_id

        logger.info(f"grn updated: business={business_id} grn={grn_id} fields={updated}")
        return {"success": True, "grn_id": grn_id, "updated_fields": updated}

    async def delete_grn(self, business_id: str, user_id: str, grn_id: str) -> dict:
        async with UnitOfWork(self.session):
            grn = await self.grns.get_for_update(business_id, grn_id)
            if not grn:
                raise NotFoundError("GRN not found")
            if grn.status not in DELETABLE_GRN_STATUSES:
                raise ValidationError(
                    f"Cannot delete a GRN with status '{grn.status}'. Only draft or cancelled GRNs can be deleted."
                )
            number = grn.grn_number
            await self.grns.delete(grn)

        logger.info(f"grn deleted: business={business_id} grn={grn_id} by={user_id}")
        return {"success": True, "grn_id": grn_id, "deleted_grn_number": number}

    # --- put-away ---

    async def put_away(self, business_id: str, user_id: str, data: PutAwayRequest, user_name: str = "") -> dict:
        upc_ids = list(dict.fromkeys(data.upc_ids))
        if len(upc_ids) > settings.PUT_AWAY_MAX_UPCS:
            raise ValidationError(f"upc_ids must contain at most {settings.PUT_AWAY_MAX_UPCS} items")

        async with UnitOfWork(self.session) as uow:
            warehouse = await self.warehouses.get_active(business_id, data.warehouse_id)
            if not warehouse:
                raise NotFoundError("Given Warehouse does not exist")
            zone = await self.zones.get_active(business_id, data.zone_id)
            if not zone:
                raise NotFoundError("Given zone does not exist")
            if zone.warehouse_id != warehouse.id:
                raise ValidationError("Given zone does not exist in the given warehouse")
            rack = await self.racks.get_active(business_id, data.rack_id)
            if not rack:
                raise NotFoundError("Given rack does not exist")
            if rack.zone_id != zone.id:
                raise ValidationError("Given rack does not exist in the given zone")
            shelf = await self.shelves.lock(business_id, data.shelf_id)
            if not shelf or shelf.is_deleted:
                raise NotFoundError("Given shelf does not exist")
            if shelf.rack_id != rack.id:
                raise ValidationError("Given shelf does not exist in the given rack")

            found = {u.id: u for u in await self.upcs.get_many_for_update(business_id, upc_ids)}
            missing = [i for i in upc_ids if i not in found]
            if missing:
                raise NotFoundError("Some UPCs do not exist", details={"missing_upcs": missing})
            not_inbound = [i for i in upc_ids if found[i].put_away != PutAwayState.inbound.value]
            if not_inbound:
                raise ValidationError("Some UPCs are not awaiting put-away", details={"upc_ids": not_inbound})

            location = {
                "shelf_id": shelf.id, "shelf_name": shelf.name,
                "rack_id": rack.id, "rack_name": rack.name,
                "zone_id": zone.id, "zone_name": zone.name,
                "warehouse_id": warehouse.id, "warehouse_name": warehouse.name,
            }

            now = utcnow()
            by_product: Dict[str, List[UPC]] = OrderedDict()
            for upc_id in upc_ids:
                upc = found[upc_id]
                upc.warehouse_id = warehouse.id
                upc.zone_id = zone.id
                upc.rack_id = rack.id
                upc.shelf_id = shelf.id
                upc.placement_id = placement_id(upc.product_id, shelf.id)
                upc.put_away = PutAwayState.none.value
                upc.updated_at = now
                upc.updated_by = user_id
                by_product.setdefault(upc.product_id, []).append(upc)

            for product_id, units in by_product.items():
                reference = units[0].grn_ref
                movement = self.movements.add(
                    Movement(
                        business_id=business_id,
                        id=uuid4().hex,
                        product_id=product_id,
                        product_sku=product_id,
                        type=MovementType.inbound.value,
                        from_location=empty_location(),
                        to_location=dict(location),
                        to_warehouse_id=warehouse.id,
                        quantity=len(units),
                        reason=PUT_AWAY_REASON,
                        reference=reference,
                        timestamp=now,
                        user_id=user_id,
                        user_name=user_name,
                    )
                )
                placement, before = await self._upsert_placement(
                    business_id, user_id, product_id, location, len(units), reference
                )
                self.audit.record(
                    EntityType.placement, placement, LogType.added, user_id,
                    quantity=len(units),
                    quantity_before=before,
                    quantity_after=placement.quantity,
                    related_movement_id=movement.id,
                    note=f"Put away {len(units)} unit(s)",
                )

            self.propagation.schedule(uow, business_id, EntityType.shelf.value, shelf.id, "stock_changed")

        logger.info(f"put-away: business={business_id} shelf={data.shelf_id} upcs={len(upc_ids)}")
        return {
            "success": True,
            "count": len(upc_ids),
            "message": f"Successfully put away {len(upc_ids)} UPC(s)",
        }

    async def _upsert_placement(
        self,
        business_id: str,
        user_id: str,
        product_id: str,
        location: dict,
        quantity: int,
        reference: Optional[str],
    ):
        pid = placement_id(product_id, location["shelf_id"])
        placement = await self.placements.get_for_update(business_id, pid)
        if placement is None:
            placement = self.placements.add(
                Placement(
                    business_id=business_id,
                    id=pid,
                    product_id=product_id,
                    product_sku=product_id,
                    quantity=0,
                    created_by=user_id,
                    **location,
                )
            )
        before = placement.quantity or 0
        placement.quantity = before + quantity
        placement.last_movement_reason = PUT_AWAY_REASON
        placement.last_movement_reference = reference
        placement.updated_at = utcnow()
        placement.updated_by = user_id
        return placement, before

    # --- чтение ---

    async def list_placements(self, business_id: str, shelf_id: str) -> List[Placement]:
        return await self.placements.list_by_shelf(business_id, shelf_id)

    async def list_product_placements(self, business_id: str, product_id: str) -> List[Placement]:
        return await self.placements.list_stocked_by_product(business_id, product_id)

    async def list_upcs(
        self,
        business_id: str,
        placement_id: Optional[str] = None,
        put_away: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[UPC]:
        if put_away and put_away not in {s.value for s in PutAwayState}:
            raise ValidationError(f"Invalid put_away state '{put_away}'")
        return await self.upcs.list_filtered(
            business_id, placement_id=placement_id, put_away=put_away, limit=clamp_limit(limit)
        )
