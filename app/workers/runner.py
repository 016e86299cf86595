# app/workers/runner.py
"""
Отдельный процесс пересчёта денормализованных полей:

    python -m app.workers.runner

Слушает канал PROPAGATION_CH и перезапускает подписку при падениях.
Без Redis (USE_REDIS=false) запускать нечего: API в этом режиме событий
не публикует.
"""
from __future__ import annotations

import asyncio
import logging
import signal
import time
from contextlib import suppress

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.events.bus import PROPAGATION_CH, close_bus_for_current_loop
from app.workers.propagation_worker import start_propagation_listener

logger = logging.getLogger("app.workers.runner")

RESTART_BACKOFF_MAX = 30.0
# подписка, прожившая дольше этого, считается здоровой: backoff сбрасываем
HEALTHY_RUN_SECONDS = 10.0


class Supervisor:
    def __init__(self):
        self.stopping = False
        self._task: asyncio.Task | None = None

    def stop(self, signame: str) -> None:
        if self.stopping:
            return
        self.stopping = True
        logger.info(f"🛑 propagation worker: got {signame}, stopping…")
        if self._task is not None:
            self._task.cancel()

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGTERM, signal.SIGINT):
            # Windows: add_signal_handler не поддерживается
            with suppress(NotImplementedError):
                loop.add_signal_handler(sig, self.stop, sig.name)

    async def run(self) -> None:
        backoff = 1.0
        logger.info(f"🧭 propagation worker started, channel={PROPAGATION_CH}")

        while not self.stopping:
            started = time.monotonic()
            self._task = asyncio.create_task(start_propagation_listener())
            try:
                await self._task
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"💥 propagation listener crashed: {e}")

            if self.stopping:
                break
            healthy = time.monotonic() - started > HEALTHY_RUN_SECONDS
            backoff = 1.0 if healthy else min(backoff * 2.0, RESTART_BACKOFF_MAX)
            logger.info(f"⏳ restarting listener in {backoff:.1f}s")
            await asyncio.sleep(backoff)

        try:
            await close_bus_for_current_loop()
        except Exception as e:
            logger.warning(f"⚠️ bus close error: {e}")
        logger.info("✅ propagation worker stopped")


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    msg = context.get("message") or "Unhandled exception in event loop"
    logger.error(f"💥 {msg}", exc_info=context.get("exception"))


async def main() -> None:
    setup_logging(settings)
    if not settings.USE_REDIS:
        logger.warning("USE_REDIS is off: nothing to listen to, exiting")
        return

    loop = asyncio.get_running_loop()
    loop.set_exception_handler(_loop_exception_handler)
    supervisor = Supervisor()
    supervisor.install_signal_handlers(loop)
    await supervisor.run()


if __name__ == "__main__":
    with suppress(KeyboardInterrupt):
        asyncio.run(main())
