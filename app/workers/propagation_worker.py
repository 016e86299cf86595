# app/workers/propagation_worker.py
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from app.db.session import async_session
from app.db.unit_of_work import UnitOfWork
from app.events.bus import PROPAGATION_CH, get_bus_for_current_loop
from app.service.derived_service import DerivedFieldsService

logger = logging.getLogger(__name__)


async def handle_event(event: Dict[str, Any]) -> None:
    """Один hierarchy.changed -> одна транзакция пересчёта."""
    business_id = event.get("business_id")
    entity_type = event.get("entity_type")
    entity_id = event.get("entity_id")
    if not (business_id and entity_type and entity_id):
        logger.warning(f"propagation: skip malformed event {event}")
        return

    async with async_session() as session:
        async with UnitOfWork(session):
            await DerivedFieldsService(session).refresh(business_id, entity_type, entity_id)
    logger.info(f"propagation: refreshed {entity_type}:{entity_id} business={business_id}")


async def start_propagation_listener(
    retry_initial_delay: float = 1.0,
    retry_max_delay: float = 30.0,
) -> None:
    """
    Подписка на канал пересчёта. Работает в ТЕКУЩЕМ event loop'е и
    переподключается при ошибках Redis.
    """
    delay = retry_initial_delay

    while True:
        pubsub = None
        try:
            bus = await get_bus_for_current_loop()
            pubsub = await bus.pubsub()
            await pubsub.subscribe(PROPAGATION_CH)
            logger.info(f"🔌 propagation: subscribed to {PROPAGATION_CH}")
            delay = retry_initial_delay

            async for msg in pubsub.listen():
                # служебные subscribe/unsubscribe пропускаем
                if not isinstance(msg, dict) or msg.get("type") != "message":
                    continue
                raw = msg.get("data")
                if not raw:
                    continue
                try:
                    event = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"propagation: bad JSON payload {raw!r}")
                    continue

                try:
                    await handle_event(event)
                except Exception:
                    # событие теряем, следующее изменение узла пересчитает снова
                    logger.exception(f"propagation: failed to handle {event}")

        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"⚠️ propagation: listener error: {e}; retry in {delay:.1f}s")
            await asyncio.sleep(delay)
            delay = min(delay * 2.0, retry_max_delay)
        finally:
            if pubsub is not None:
                try:
                    await pubsub.aclose()
                except Exception as e:
                    logger.debug(f"pubsub close error: {e}")
