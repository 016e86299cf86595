from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_authorization, get_move_service, get_shelf_service, require_write_access
from app.auth.authorization import AuthorizationResult
from app.schemas.common import SuccessResponse
from app.schemas.shelf import ShelfCreate, ShelfCreated, ShelfList, ShelfMove, ShelfUpdate
from app.service.move_service import MoveService
from app.service.shelf_service import ShelfService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["shelves"])


@router.post(
        "/shelves",
        response_model=ShelfCreated,
        status_code=status.HTTP_201_CREATED,
        summary="Создать полку"
)
async def create_shelf(
    business_id: str,
    payload: ShelfCreate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ShelfService = Depends(get_shelf_service),
):
    shelf = await service.create_shelf(auth.target_business_id, auth.user_id, payload)
    return {"success": True, "shelf": shelf}


@router.get("/shelves", response_model=ShelfList, summary="Полки стеллажа по position")
async def list_shelves(
    business_id: str,
    rack_id: str = Query(..., min_length=1),
    auth: AuthorizationResult = Depends(get_authorization),
    service: ShelfService = Depends(get_shelf_service),
):
    return {"shelves": await service.list_shelves(auth.target_business_id, rack_id)}


@router.put("/shelves/{shelf_id}", response_model=SuccessResponse)
async def update_shelf(
    business_id: str,
    shelf_id: str,
    payload: ShelfUpdate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ShelfService = Depends(get_shelf_service),
):
    await service.update_shelf(auth.target_business_id, auth.user_id, shelf_id, payload)
    return {"success": True}


@router.put("/shelves/{shelf_id}/move", response_model=SuccessResponse, summary="Перенести полку в другой стеллаж")
async def move_shelf(
    business_id: str,
    shelf_id: str,
    payload: ShelfMove,
    auth: AuthorizationResult = Depends(require_write_access),
    service: MoveService = Depends(get_move_service),
):
    await service.move_shelf(auth.target_business_id, auth.user_id, shelf_id, payload)
    return {"success": True}


@router.delete("/shelves/{shelf_id}", response_model=SuccessResponse)
async def delete_shelf(
    business_id: str,
    shelf_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: ShelfService = Depends(get_shelf_service),
):
    await service.delete_shelf(auth.target_business_id, auth.user_id, shelf_id)
    return {"success": True}
