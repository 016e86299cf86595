from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_authorization, get_zone_service, require_write_access
from app.auth.authorization import AuthorizationResult
from app.schemas.common import SuccessResponse
from app.schemas.zone import ZoneCreate, ZoneCreated, ZoneList, ZoneMove, ZoneUpdate
from app.service.zone_service import ZoneService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["zones"])


@router.post(
        "/zones",
        response_model=ZoneCreated,
        status_code=status.HTTP_201_CREATED,
        summary="Создать зону"
)
async def create_zone(
    business_id: str,
    payload: ZoneCreate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ZoneService = Depends(get_zone_service),
):
    zone = await service.create_zone(auth.target_business_id, auth.user_id, payload)
    return {"success": True, "zone": zone}


@router.get("/zones", response_model=ZoneList, summary="Зоны склада (по имени)")
async def list_zones(
    business_id: str,
    warehouse_id: Optional[str] = Query(None),
    auth: AuthorizationResult = Depends(get_authorization),
    service: ZoneService = Depends(get_zone_service),
):
    return {"zones": await service.list_zones(auth.target_business_id, warehouse_id)}


@router.put("/zones/{zone_id}", response_model=SuccessResponse)
async def update_zone(
    business_id: str,
    zone_id: str,
    payload: ZoneUpdate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ZoneService = Depends(get_zone_service),
):
    await service.update_zone(auth.target_business_id, auth.user_id, zone_id, payload)
    return {"success": True}


@router.put("/zones/{zone_id}/move", response_model=SuccessResponse, summary="Перенести зону в другой склад")
async def move_zone(
    business_id: str,
    zone_id: str,
    payload: ZoneMove,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ZoneService = Depends(get_zone_service),
):
    await service.move_zone(auth.target_business_id, auth.user_id, zone_id, payload)
    return {"success": True}


@router.delete("/zones/{zone_id}", response_model=SuccessResponse)
async def delete_zone(
    business_id: str,
    zone_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ZoneService = Depends(get_zone_service),
):
    await service.delete_zone(auth.target_business_id, auth.user_id, zone_id)
    return {"success": True}
