from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from app.core.config import settings
from app.db.base import utcnow
from app.db.unit_of_work import UnitOfWork
from app.events.bus import EventBus

logger = logging.getLogger(__name__)

BusFactory = Callable[[], Awaitable[EventBus]]


class PropagationService:
    """
    Ставит в очередь пересчёт денормализованных полей (имена предков, path,
    stats) после изменения структуры. Публикуем только после commit и не
    ждём обработчика: инварианты позиций от этих полей не зависят.
    """

    def __init__(self, bus_factory: Optional[BusFactory] = None, channel: Optional[str] = None):
        self._bus_factory = bus_factory
        self._channel = channel or settings.PROPAGATION_CHANNEL

    def schedule(
        self,
        uow: UnitOfWork,
        business_id: str,
        entity_type: str,
        entity_id: str,
        action: str,
    ) -> None:
        payload = {
            "type": "hierarchy.changed",
            "business_id": business_id,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "ts": utcnow().isoformat(),
        }

        async def _publish() -> None:
            await self.publish(payload)

        uow.after_commit(_publish)

    async def publish(self, payload: dict) -> None:
        if self._bus_factory is None:
            logger.debug(f"propagation disabled, skip {payload}")
            return
        try:
            bus = await self._bus_factory()
            await bus.publish(self._channel, payload)
        except Exception as e:
            # запрос уже закоммичен, пересчёт догонит при следующем событии
            logger.error(f"Failed to publish propagation event {payload}: {e}")
