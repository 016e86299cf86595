from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_authorization, get_stock_service, require_write_access
from app.auth.authorization import AuthorizationResult
from app.schemas.stock import (
    ConfirmPutAwayResult,
    GRNCreate,
    GRNCreated,
    GRNDeleted,
    GRNUpdate,
    GRNUpdated,
    PlacementList,
    ProductPlacementList,
    PutAwayRequest,
    PutAwayResult,
    UPCList,
)
from app.service.stock_service import StockService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["inventory"])


@router.post(
        "/grns",
        response_model=GRNCreated,
        status_code=status.HTTP_201_CREATED,
        summary="Создать приходную накладную (draft)"
)
async def create_grn(
    business_id: str,
    payload: GRNCreate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: StockService = Depends(get_stock_service),
):
    grn = await service.create_grn(auth.target_business_id, auth.user_id, payload)
    return {"success": True, "grn": grn}


@router.put("/grns/{grn_id}", response_model=GRNUpdated, summary="Изменить черновик GRN или отменить его")
async def update_grn(
    business_id: str,
    grn_id: str,
    payload: GRNUpdate,
    auth: AuthorizationResult = Depends(require_write_access),
    service: StockService = Depends(get_stock_service),
):
    return await service.update_grn(auth.target_business_id, auth.user_id, grn_id, payload)


@router.delete("/grns/{grn_id}", response_model=GRNDeleted, summary="Удалить GRN (draft / cancelled)")
async def delete_grn(
    business_id: str,
    grn_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: StockService = Depends(get_stock_service),
):
    return await service.delete_grn(auth.target_business_id, auth.user_id, grn_id)


@router.post(
        "/grns/{grn_id}/confirm-put-away",
        response_model=ConfirmPutAwayResult,
        summary="Подтвердить GRN: создать UPC на каждую принятую единицу"
)
async def confirm_put_away(
    business_id: str,
    grn_id: str,
    auth: AuthorizationResult = Depends(require_write_access),
    service: StockService = Depends(get_stock_service),
):
    return await service.confirm_put_away(auth.target_business_id, auth.user_id, grn_id)


@router.post("/put-away", response_model=PutAwayResult, summary="Разложить UPC на полку")
async def put_away(
    business_id: str,
    payload: PutAwayRequest,
    auth: AuthorizationResult = Depends(require_write_access),
    service: StockService = Depends(get_stock_service),
):
    return await service.put_away(auth.target_business_id, auth.user_id, payload)


@router.get("/placements", response_model=PlacementList)
async def list_placements(
    business_id: str,
    shelf_id: str = Query(..., min_length=1),
    auth: AuthorizationResult = Depends(get_authorization),
    service: StockService = Depends(get_stock_service),
):
    return {"placements": await service.list_placements(auth.target_business_id, shelf_id)}


@router.get("/product-placements", response_model=ProductPlacementList, summary="Где лежит товар (quantity > 0)")
async def list_product_placements(
    business_id: str,
    product_id: str = Query(..., min_length=1),
    auth: AuthorizationResult = Depends(get_authorization),
    service: StockService = Depends(get_stock_service),
):
    return {"placements": await service.list_product_placements(auth.target_business_id, product_id)}


@router.get("/upcs", response_model=UPCList)
async def list_upcs(
    business_id: str,
    placement_id: Optional[str] = Query(None),
    put_away: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    auth: AuthorizationResult = Depends(get_authorization),
    service: StockService = Depends(get_stock_service),
):
    upcs = await service.list_upcs(auth.target_business_id, placement_id, put_away, limit)
    return {"upcs": upcs}
