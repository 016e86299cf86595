import logging
from typing import List
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError, integrity_to_error
from app.db.unit_of_work import UnitOfWork
from app.domain.codes import normalize_code, require_text
from app.models.enums import EntityType, LogType
from app.models.warehouse import Warehouse
from app.repositories.log_repo import LogRepository
from app.repositories.warehouse_repo import WarehouseRepository
from app.repositories.zone_repo import ZoneRepository
from app.schemas.warehouse import WarehouseCreate, WarehouseUpdate
from app.service.audit_service import AuditService, diff, snapshot
from app.service.lifecycle_service import reactivate, soft_delete
from app.service.propagation_service import PropagationService

logger = logging.getLogger(__name__)

WAREHOUSE_STATS = ("total_zones", "total_racks", "total_shelves", "total_products")
UPDATABLE = ("name", "address", "storage_capacity", "operational_hours", "default_gst_state")


class WarehouseService:
    def __init__(self, session: AsyncSession, propagation: PropagationService):
        self.session = session
        self.repo = WarehouseRepository(session)
        self.zones = ZoneRepository(session)
        self.audit = AuditService(LogRepository(session))
        self.propagation = propagation

    async def create_warehouse(self, business_id: str, user_id: str, data: WarehouseCreate) -> Warehouse:
        name = require_text(data.name, "Warehouse name")
        code = normalize_code(require_text(data.code, "Warehouse code"))
        fields = dict(
            name=name,
            code=code,
            address=(data.address or "").strip(),
            storage_capacity=data.storage_capacity,
            operational_hours=data.operational_hours,
            default_gst_state=data.default_gst_state,
        )

        try:
            async with UnitOfWork(self.session) as uow:
                same_code = await self.repo.find_by_code(business_id, code)
                if any(not w.is_deleted for w in same_code):
                    raise ConflictError(
                        f'Warehouse with code "{code}" already exists',
                        details={"code": code},
                    )

                if same_code:
                    # код удалённого склада: переиспользуем самый свежий документ
                    warehouse = same_code[0]
                    reactivate(warehouse, fields, WAREHOUSE_STATS, user_id)
                    action = LogType.restored
                else:
                    warehouse = Warehouse(
                        business_id=business_id,
                        id=uuid4().hex,
                        created_by=user_id,
                        updated_by=user_id,
                        **fields,
                    )
                    self.repo.add(warehouse)
                    action = LogType.created

                self.audit.record(EntityType.warehouse, warehouse, action, user_id, note=f"Warehouse {action.value}")
                self.propagation.schedule(uow, business_id, EntityType.warehouse.value, warehouse.id, action.value)
        except IntegrityError as e:
            raise integrity_to_error(e, f'Warehouse with code "{code}" already exists')

        logger.info(f"warehouse {action.value}: business={business_id} id={warehouse.id} code={code}")
        return warehouse

    async def list_warehouses(self, business_id: str) -> List[Warehouse]:
        return await self.repo.list_active(business_id)

    async def get_warehouse(self, business_id: str, warehouse_id: str) -> Warehouse:
        warehouse = await self.repo.get_active(business_id, warehouse_id)
        if not warehouse:
            raise NotFoundError(f"Warehouse '{warehouse_id}' not found")
        return warehouse

    async def update_warehouse(self, business_id: str, user_id: str, warehouse_id: str, data: WarehouseUpdate) -> Warehouse:
        payload = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in payload:
            payload["name"] = require_text(payload["name"], "Warehouse name")

        async with UnitOfWork(self.session) as uow:
            warehouse = await self.repo.lock(business_id, warehouse_id)
            if not warehouse or warehouse.is_deleted:
                raise NotFoundError(f"Warehouse '{warehouse_id}' not found")

            before = snapshot(warehouse, UPDATABLE)
            for key, value in payload.items():
                setattr(warehouse, key, value)
            changes = diff(before, snapshot(warehouse, UPDATABLE), UPDATABLE)
            if not changes:
                return warehouse

            if "name" in changes:
                warehouse.name_version += 1
            warehouse.updated_by = user_id
            self.audit.record(EntityType.warehouse, warehouse, LogType.updated, user_id, changes=changes)
            if "name" in changes:
                self.propagation.schedule(uow, business_id, EntityType.warehouse.value, warehouse.id, "renamed")
        return warehouse

    async def delete_warehouse(self, business_id: str, user_id: str, warehouse_id: str) -> None:
        async with UnitOfWork(self.session) as uow:
            warehouse = await self.repo.lock(business_id, warehouse_id)
            if not warehouse or warehouse.is_deleted:
                raise NotFoundError(f"Warehouse '{warehouse_id}' not found")

            live = await self.zones.count_active(business_id, warehouse.id)
            soft_delete(warehouse, live, "zones", user_id)
            self.audit.record(EntityType.warehouse, warehouse, LogType.deleted, user_id, note="Warehouse deleted")
            self.propagation.schedule(uow, business_id, EntityType.warehouse.value, warehouse.id, LogType.deleted.value)
        logger.info(f"warehouse deleted: business={business_id} id={warehouse_id}")
