from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from app.core.config import settings
from app.db.base import Base
import app.models  # noqa: F401  регистрирует все таблицы в Base.metadata

config = context.config

# --- URL БД: из Settings (DB_URL / DATABASE_URL / SQLALCHEMY_DATABASE_URI / DB_DSN) ---
if not settings.DB_URL:
    raise RuntimeError("DB URL not found (DB_URL / DATABASE_URL / SQLALCHEMY_DATABASE_URI / DB_DSN)")
config.set_main_option("sqlalchemy.url", settings.DB_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
IS_SQLITE = settings.DB_URL.startswith("sqlite")


def include_object(obj, name, type_, reflected, compare_to):
    # служебную таблицу Alembic не трогаем
    return not (type_ == "table" and name == "alembic_version")


def _configure_ctx(**kw):
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        include_object=include_object,
        # sqlite не умеет ALTER COLUMN, только через batch
        render_as_batch=IS_SQLITE,
        version_table="alembic_version",
        **kw,
    )


def run_migrations_offline() -> None:
    _configure_ctx(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    _configure_ctx(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async def run():
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
        await connectable.dispose()

    asyncio.run(run())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
