# app/events/bus.py
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as aioredis

from app.core.config import settings

logger = logging.getLogger(__name__)

# канал событий hierarchy.changed (API публикует, воркер пересчёта слушает)
PROPAGATION_CH = settings.PROPAGATION_CHANNEL


class EventBus:
    """Тонкая обёртка над redis pub/sub: JSON на входе, JSON на выходе."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._redis: Optional[aioredis.Redis] = None

    @property
    def connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(
                self._dsn,
                encoding="utf-8",
                decode_responses=True,
                health_check_interval=30,
                retry_on_timeout=True,
            )
            logger.debug(f"event bus connected: {self._dsn}")
        return self._redis

    async def publish(self, channel: str, payload: Dict[str, Any]) -> int:
        """Возвращает число подписчиков, получивших сообщение (0 = воркер не слушает)."""
        client = await self.connect()
        receivers = await client.publish(channel, json.dumps(payload, default=str))
        if not receivers:
            logger.debug(f"no subscribers on {channel} for {payload.get('type')}")
        return receivers

    async def pubsub(self):
        client = await self.connect()
        return client.pubsub()

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


# --- по одному bus на event loop: redis-клиент нельзя делить между loop'ами ---
_buses: Dict[int, EventBus] = {}


async def get_bus_for_current_loop() -> EventBus:
    key = id(asyncio.get_running_loop())
    bus = _buses.get(key)
    if bus is None:
        bus = EventBus(settings.REDIS_DSN)
        await bus.connect()
        _buses[key] = bus
    return bus


async def close_bus_for_current_loop() -> None:
    bus = _buses.pop(id(asyncio.get_running_loop()), None)
    if bus is not None:
        await bus.close()


__all__ = [
    "EventBus",
    "PROPAGATION_CH",
    "get_bus_for_current_loop",
    "close_bus_for_current_loop",
]
