from fastapi import APIRouter, Depends, status

from app.api.deps import get_authorization, get_warehouse_service, require_write_access
from app.auth.authorization import AuthorizationResult
from app.schemas.common import SuccessResponse
from app.schemas.warehouse import WarehouseCreate, WarehouseCreated, WarehouseList, WarehouseRead, WarehouseUpdate
from app.service.warehouse_service import WarehouseService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["warehouses"])


@router.post(
        "/warehouses",
        response_model=WarehouseCreated,
        status_code=status.HTTP_201_CREATED,
        summary="Создать склад"
)
async def create_warehouse(
    business_id: str,
    payload: WarehouseCreate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: WarehouseService = Depends(get_warehouse_service),
):
    warehouse = await service.create_warehouse(auth.target_business_id, auth.user_id, payload)
    return {"success": True, "warehouse": warehouse}


@router.get(
        "/warehouses",
        response_model=WarehouseList,
        summary="Список складов"
)
async def list_warehouses(
    business_id: str,
    auth: AuthorizationResult = Depends(get_authorization),
    service: WarehouseService = Depends(get_warehouse_service),
):
    return {"warehouses": await service.list_warehouses(auth.target_business_id)}


@router.get(
        "/warehouses/{warehouse_id}",
        response_model=WarehouseRead,
        summary="Получить склад по ID"
)
async def get_warehouse(
    business_id: str,
    warehouse_id: str,
    auth: AuthorizationResult = Depends(get_authorization),
    service: WarehouseService = Depends(get_warehouse_service),
):
    return await service.get_warehouse(auth.target_business_id, warehouse_id)


@router.put("/warehouses/{warehouse_id}", response_model=SuccessResponse)
async def update_warehouse(
    business_id: str,
    warehouse_id: str,
    payload: WarehouseUpdate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: WarehouseService = Depends(get_warehouse_service),
):
    await service.update_warehouse(auth.target_business_id, auth.user_id, warehouse_id, payload)
    return {"success": True}


@router.delete("/warehouses/{warehouse_id}", response_model=SuccessResponse)
async def delete_warehouse(
    business_id: str,
    warehouse_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: WarehouseService = Depends(get_warehouse_service),
):
    await service.delete_warehouse(auth.target_business_id, auth.user_id, warehouse_id)
    return {"success": True}
