from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from app.core.config import settings

engine = create_async_engine(
    settings.DB_URL or "sqlite+aiosqlite:///./warehouse.db",
    echo=False,
    future=True,
    pool_pre_ping=True,           # проверка соединения перед выдачей из пула
    **(
        {
            "pool_size": settings.DB_POOL_SIZE,          # постоянный пул
            "max_overflow": settings.DB_MAX_OVERFLOW,    # доп. временные соединения
            "pool_timeout": settings.DB_POOL_TIMEOUT,    # ожидание свободного соединения
            "pool_recycle": settings.DB_POOL_RECYCLE,    # раз в N сек перезапуск соединений (anti-idle)
        }
        if settings.DB_URL and not settings.DB_URL.startswith("sqlite")
        else {}
    ),
)

# sessionmaker с отключённым expire_on_commit, чтобы данные не инвалидировались после commit()
async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# dependency для FastAPI
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session
