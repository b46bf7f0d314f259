# -*- coding: utf-8 -*-
"""
Клиент для работы с реляционной базой данных (PostgreSQL в проде, SQLite в тестах).
"""
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)

from pdd_trainer.config.settings import settings
from pdd_trainer.domain.models import Base

# Создаем асинхронный движок для подключения к базе данных
async_engine = create_async_engine(
    settings.database_url,
    echo=False,  # Отключаем логирование SQL запросов
    pool_pre_ping=True,  # Проверяем соединение перед использованием
    pool_recycle=3600,  # Переподключаемся каждый час
)

# Создаем фабрику асинхронных сессий
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Предоставляет асинхронную сессию базы данных для внедрения зависимостей в FastAPI.

    Сессия живёт ровно один запрос; при любом исключении незакоммиченные
    изменения откатываются.

    Yields:
        AsyncSession: Активная сессия базы данных
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db_connection() -> None:
    """
    Проверяет доступность базы данных простым запросом.

    Raises:
        OperationalError: База данных недоступна
    """
    async with async_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def init_db() -> None:
    """
    Создаёт все таблицы, описанные в моделях, и настраивает мапперы.

    Raises:
        SQLAlchemyError: Ошибки при создании таблиц
    """
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        Base.registry.configure()
