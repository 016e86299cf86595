# app/db/unit_of_work.py
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

AfterCommit = Callable[[], Awaitable[None]]


class UnitOfWork:
    """
    Одна логическая операция = один commit.

    Репозитории только добавляют/меняют объекты в сессии, фиксирует их
    исключительно UnitOfWork при выходе из блока ``async with``. Если внутри
    блока вылетело исключение, откатываем всё, частичных сдвигов позиций
    в базе не остаётся.

    Колбэки ``after_commit`` выполняются только после успешного commit
    (например, публикация события на пересчёт денормализованных полей).
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._after_commit: List[AfterCommit] = []
        self._active = False

    async def __aenter__(self) -> "UnitOfWork":
        if self._active:
            raise RuntimeError("UnitOfWork is not re-entrant")
        self._active = True
        self._after_commit = []
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._active = False
        if exc_type is not None:
            await self.session.rollback()
            return

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        callbacks, self._after_commit = self._after_commit, []
        for cb in callbacks:
            await cb()

    def add(self, obj) -> None:
        self.session.add(obj)

    def add_all(self, objs) -> None:
        self.session.add_all(objs)

    async def flush(self) -> None:
        await self.session.flush()

    def after_commit(self, cb: AfterCommit) -> None:
        self._after_commit.append(cb)
