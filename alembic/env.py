import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from pdd_trainer.domain.models import Base

# это объект конфигурации Alembic, который предоставляет
# доступ к значениям в используемом .ini файле.
config = context.config

# Интерпретируем конфигурационный файл для логирования Python.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# MetaData моделей для поддержки 'autogenerate'
target_metadata = Base.metadata


def get_url():
    """Получаем URL базы данных из настроек приложения."""
    from pdd_trainer.config.settings import settings

    return settings.database_url


def run_migrations_offline() -> None:
    """Запуск миграций в 'offline' режиме.

    Контекст настраивается только URL, без Engine; вызовы
    context.execute() выводят SQL в вывод скрипта.
    """
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Миграции через асинхронный движок (asyncpg / aiosqlite)."""
    connectable = async_engine_from_config(
        {"sqlalchemy.url": get_url()},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Запуск миграций в 'online' режиме."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
