# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/users.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Операции с пользователями в базе данных.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.enums import Role
from pdd_trainer.domain.models import (EmailVerificationToken,
                                       PasswordResetToken, TestAttempt,
                                       TopicProgress, User, UserAnswer)


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    role: Role = Role.USER,
    is_verified: bool = False,
) -> User:
    """
    Создать нового пользователя.

    Args:
        session: Сессия базы данных
        email: Нормализованный email
        password_hash: Хэш пароля
        role: Роль пользователя
        is_verified: Подтверждён ли email

    Returns:
        Созданный пользователь (с присвоенным ID)
    """
    user = User(
        email=email,
        password_hash=password_hash,
        role=role,
        is_verified=is_verified,
    )
    session.add(user)
    await session.flush()
    logger.debug(f"Пользователь {email} создан с ID {user.id}")
    return user


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """Найти пользователя по email (без учёта регистра)."""
    stmt = select(User).where(User.email == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def update_user_password(
    session: AsyncSession, user: User, password_hash: str
) -> User:
    user.password_hash = password_hash
    await session.flush()
    return user


async def delete_user_with_dependencies(session: AsyncSession, user: User) -> None:
    """
    Удалить пользователя вместе с токенами, попытками, ответами и прогрессом.

    Удаление выполняется явными запросами, так как SQLite в тестах не
    применяет ON DELETE CASCADE.
    """
    attempt_ids = select(TestAttempt.id).where(TestAttempt.user_id == user.id)

    await session.execute(
        delete(UserAnswer).where(UserAnswer.attempt_id.in_(attempt_ids))
    )
    await session.execute(delete(TopicProgress).where(TopicProgress.user_id == user.id))
    await session.execute(delete(TestAttempt).where(TestAttempt.user_id == user.id))
    await session.execute(
        delete(EmailVerificationToken).where(EmailVerificationToken.user_id == user.id)
    )
    await session.execute(
        delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id)
    )
    await session.delete(user)
    await session.flush()
    logger.info(f"Пользователь {user.email} (ID: {user.id}) удалён со всеми данными")
