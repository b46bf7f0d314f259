# -*- coding: utf-8 -*-
"""
Утилиты для проверки и создания администратора системы.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pdd_trainer.clients.database_client import AsyncSessionLocal
from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings
from pdd_trainer.domain.enums import Role
from pdd_trainer.domain.models import User
from pdd_trainer.repository.users import create_user, get_user_by_email
from pdd_trainer.security.security import hash_password

logger = configure_logger()


async def check_admin_exists(session: AsyncSession) -> bool:
    """
    Проверяет, существует ли пользователь с ролью ADMIN.

    Returns:
        bool: True если админ существует, False в противном случае
    """
    result = await session.execute(
        select(User.id).where(User.role == Role.ADMIN).limit(1)
    )
    return result.first() is not None


async def create_default_admin(session: AsyncSession, email: str, password: str) -> User:
    """
    Создаёт подтверждённого пользователя с ролью ADMIN.

    Если пользователь с таким email уже есть, он повышается до администратора.
    """
    existing = await get_user_by_email(session, email)
    if existing is not None:
        existing.role = Role.ADMIN
        existing.is_verified = True
        await session.commit()
        logger.info(f"✅ Пользователь {existing.email} назначен администратором")
        return existing

    admin = await create_user(
        session,
        email.strip().lower(),
        hash_password(password),
        role=Role.ADMIN,
        is_verified=True,
    )
    await session.commit()
    logger.info(f"✅ Администратор создан ({admin.email})")
    return admin


async def ensure_admin_exists(
    session_factory: async_sessionmaker = AsyncSessionLocal,
) -> bool:
    """
    Проверяет существование админа и создает его при необходимости.

    Учётные данные берутся из ``ADMIN_EMAIL``/``ADMIN_PASSWORD``; если они
    не заданы, шаг пропускается.

    Returns:
        bool: True если администратор есть или был создан
    """
    if not settings.admin_email or not settings.admin_password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD не заданы, создание администратора пропущено")
        return False

    try:
        async with session_factory() as session:
            if await check_admin_exists(session):
                return True
            await create_default_admin(
                session, settings.admin_email, settings.admin_password
            )
            return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Ошибка при создании администратора: {e}")
        raise
