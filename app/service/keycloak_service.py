import asyncio
import logging
from typing import Any, Dict

import httpx
from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

from app.core.config import settings
from app.core.errors import UnauthorizedError, WarehouseError

logger = logging.getLogger(__name__)


class KeycloakService:
    """Только проверка bearer-токена: выдача токенов живёт в identity provider."""

    def __init__(self):
        logger.debug(
            f"Initializing Keycloak: URL={settings.KEYCLOAK_URL}, "
            f"Realm={settings.KEYCLOAK_REALM}, "
            f"Client={settings.KEYCLOAK_CLIENT_ID}"
        )

        self.keycloak_openid = KeycloakOpenID(
            server_url=settings.KEYCLOAK_URL,
            client_id=settings.KEYCLOAK_CLIENT_ID,
            realm_name=settings.KEYCLOAK_REALM,
            client_secret_key=settings.KEYCLOAK_CLIENT_SECRET,
            verify=True,
        )

    async def get_user_info(self, token: str) -> Dict[str, Any]:
        """Получение информации о пользователе"""
        try:
            user_info = await asyncio.to_thread(self.keycloak_openid.userinfo, token)
            logger.debug(f"User info retrieved: {user_info.get('sub')}")
            return user_info
        except KeycloakError as e:
            logger.warning(f"Direct userinfo failed: {e}, attempting token exchange")
            exchanged = await self._exchange_token(token)
            return await asyncio.to_thread(self.keycloak_openid.userinfo, exchanged["access_token"])

    async def validate_token(self, token: str) -> bool:
        """Проверка валидности токена"""
        try:
            result = await asyncio.to_thread(self.keycloak_openid.introspect, token)
            if result.get("active", False):
                return True

            logger.warning("Token is not active, attempting token exchange")
            exchanged = await self._exchange_token(token)
            result = await asyncio.to_thread(self.keycloak_openid.introspect, exchanged["access_token"])
            return bool(result.get("active", False))
        except (KeycloakError, UnauthorizedError) as e:
            logger.error(f"Token validation error: {e}")
            return False

    async def _exchange_token(self, subject_token: str) -> Dict[str, Any]:
        """Обмен токена"""
        data = {
            "grant_type": "urn:ietf:params:oauth:grant-type:token-exchange",
            "subject_token": subject_token,
            "subject_token_type": "urn:ietf:params:oauth:token-type:access_token",
            "client_id": settings.KEYCLOAK_CLIENT_ID,
            "client_secret": settings.KEYCLOAK_CLIENT_SECRET,
            "scope": "openid",
        }
        url = f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}/protocol/openid-connect/token"

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(url, data=data, timeout=10.0)
            except httpx.HTTPError as e:
                logger.error(f"Token exchange request failed: {e}")
                raise WarehouseError("Token exchange request failed")

        if response.status_code != 200:
            logger.error(f"Token exchange failed with status {response.status_code}: {response.text}")
            raise UnauthorizedError("Invalid or expired token")
        return response.json()

    async def get_identity_from_token(self, access_token: str) -> Dict[str, Any]:
        """
        Возвращает claims пользователя по access_token.
        Бросает 401, если токен невалиден/просрочен.
        """
        if not await self.validate_token(access_token):
            raise UnauthorizedError("Invalid or expired access token")

        try:
            user_info = await self.get_user_info(access_token)
        except KeycloakError as e:
            logger.error(f"Failed to get user info: {e}")
            raise UnauthorizedError("Failed to get user information")
        if not user_info or "sub" not in user_info:
            raise UnauthorizedError("Invalid token payload: no 'sub'")
        return user_info
