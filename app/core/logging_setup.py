# app/core/logging_setup.py
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings) -> Optional[Path]:
    """Консольный лог + (опционально) ротируемый файл settings.LOG_FILE."""
    level = getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)
    fmt = logging.Formatter(_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    handlers: list[logging.Handler] = []
    if not any(getattr(h, "_warehouse_console", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console._warehouse_console = True  # type: ignore[attr-defined]
        handlers.append(console)

    log_path: Optional[Path] = None
    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # не дублируем хендлеры при повторном вызове (reload uvicorn)
        if not any(getattr(h, "baseFilename", "") == str(log_path.resolve()) for h in root.handlers):
            file_handler = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(fmt)
            handlers.append(file_handler)

    for h in handlers:
        h.setLevel(level)
        root.addHandler(h)

    # uvicorn держит свои хендлеры, файл подключаем к ним отдельно
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        for h in handlers:
            if isinstance(h, logging.handlers.RotatingFileHandler) and not lg.propagate:
                lg.addHandler(h)

    return log_path
