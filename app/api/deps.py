import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.authorization import AuthorizationResult, BusinessAuthorizer
from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.db.session import get_session
from app.events.bus import get_bus_for_current_loop
from app.repositories.member_repo import MemberRepository

# Services
from app.service.history_service import HistoryService
from app.service.keycloak_service import KeycloakService
from app.service.move_service import MoveService
from app.service.propagation_service import PropagationService
from app.service.rack_service import RackService
from app.service.shelf_service import ShelfService
from app.service.stock_service import StockService
from app.service.warehouse_service import WarehouseService
from app.service.zone_service import ZoneService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def get_propagation_service() -> PropagationService:
    return PropagationService(get_bus_for_current_loop if settings.USE_REDIS else None)


#Services
def get_warehouse_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> WarehouseService:
    return WarehouseService(db, propagation)


def get_zone_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> ZoneService:
    return ZoneService(db, propagation)


def get_rack_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> RackService:
    return RackService(db, propagation)


def get_shelf_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> ShelfService:
    return ShelfService(db, propagation)


def get_move_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> MoveService:
    return MoveService(db, propagation)


def get_stock_service(
    db: AsyncSession = Depends(get_session),
    propagation: PropagationService = Depends(get_propagation_service),
) -> StockService:
    return StockService(db, propagation)


def get_history_service(db: AsyncSession = Depends(get_session)) -> HistoryService:
    return HistoryService(db)


def get_keycloak_service() -> KeycloakService:
    return KeycloakService()


# Auth
async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_svc: KeycloakService = Depends(get_keycloak_service),
) -> str:
    """Зависимость: bearer-токен -> user_id (sub)"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("User not logged in")
    identity = await auth_svc.get_identity_from_token(credentials.credentials)
    return identity["sub"]


async def get_authorization(
    business_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> AuthorizationResult:
    """Чтение: владелец, супер-админ или активный участник бизнеса."""
    authorizer = BusinessAuthorizer(MemberRepository(db), settings.SUPER_ADMIN_ID)
    result = await authorizer.authorise(business_id, user_id)
    return result.raise_for_status()


async def require_write_access(
    auth: AuthorizationResult = Depends(get_authorization),
) -> AuthorizationResult:
    """Запись: vendor только читает."""
    return auth.require_write()
