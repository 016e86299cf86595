from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_authorization, get_history_service
from app.auth.authorization import AuthorizationResult
from app.schemas.log import LogList
from app.schemas.stock import MovementPage
from app.service.history_service import HistoryService

router = APIRouter(prefix="/business/{business_id}/warehouse", tags=["history"])


@router.get("/logs", response_model=LogList, summary="Логи сущности (новые сверху)")
async def list_logs(
    business_id: str,
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    auth: AuthorizationResult = Depends(get_authorization),
    service: HistoryService = Depends(get_history_service),
):
    logs = await service.list_logs(auth.target_business_id, entity_type, entity_id, limit, log_type=type)
    return {"logs": logs}


@router.get("/movements", response_model=MovementPage, summary="Движения товара (курсор start_after)")
async def list_movements(
    business_id: str,
    type: Optional[str] = Query(None),
    product_sku: Optional[str] = Query(None),
    warehouse_id: Optional[str] = Query(None),
    start_after: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    auth: AuthorizationResult = Depends(get_authorization),
    service: HistoryService = Depends(get_history_service),
):
    return await service.list_movements(
        auth.target_business_id,
        type=type,
        product_sku=product_sku,
        warehouse_id=warehouse_id,
        start_after=start_after,
        limit=limit,
    )
