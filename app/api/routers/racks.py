from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_authorization, get_move_service, get_rack_service, require_write_access
from app.auth.authorization import AuthorizationResult
from app.schemas.common import SuccessResponse
from app.schemas.rack import RackCreate, RackCreated, RackList, RackMove, RackUpdate
from app.service.move_service import MoveService
from app.service.rack_service import RackService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["racks"])


@router.post(
        "/racks",
        response_model=RackCreated,
        status_code=status.HTTP_201_CREATED,
        summary="Создать стеллаж (position -> вставка со сдвигом)"
)
async def create_rack(
    business_id: str,
    payload: RackCreate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: RackService = Depends(get_rack_service),
):
    rack = await service.create_rack(auth.target_business_id, auth.user_id, payload)
    return {"success": True, "rack": rack}


@router.get("/racks", response_model=RackList, summary="Стеллажи зоны по position")
async def list_racks(
    business_id: str,
    zone_id: str = Query(..., min_length=1),
    auth: AuthorizationResult = Depends(get_authorization),
    service: RackService = Depends(get_rack_service),
):
    return {"racks": await service.list_racks(auth.target_business_id, zone_id)}


@router.put("/racks/{rack_id}", response_model=SuccessResponse)
async def update_rack(
    business_id: str,
    rack_id: str,
    payload: RackUpdate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: RackService = Depends(get_rack_service),
):
    await service.update_rack(auth.target_business_id, auth.user_id, rack_id, payload)
    return {"success": True}


@router.put("/racks/{rack_id}/move", response_model=SuccessResponse, summary="Перенести стеллаж в другую зону")
async def move_rack(
    business_id: str,
    rack_id: str,
    payload: RackMove,
    auth: AuthorizationResult = Depends(require_write_access),
    service: MoveService = Depends(get_move_service),
):
    await service.move_rack(auth.target_business_id, auth.user_id, rack_id, payload)
    return {"success": True}


@router.delete("/racks/{rack_id}", response_model=SuccessResponse)
async def delete_rack(
    business_id: str,
    rack_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: RackService = Depends(get_rack_service),
):
    await service.delete_rack(auth.target_business_id, auth.user_id, rack_id)
    return {"success": True}
