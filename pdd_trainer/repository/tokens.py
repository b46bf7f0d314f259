# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/tokens.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Одноразовые токены: подтверждение email и сброс пароля.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pdd_trainer.domain.models import EmailVerificationToken, PasswordResetToken

TokenModel = TypeVar("TokenModel", EmailVerificationToken, PasswordResetToken)


def generate_token() -> str:
    """Непрозрачный случайный токен (64 hex-символа)."""
    return secrets.token_hex(32)


async def _create_token(
    session: AsyncSession, model: Type[TokenModel], user_id: int, ttl: timedelta
) -> TokenModel:
    token = model(
        token=generate_token(),
        user_id=user_id,
        expires_at=datetime.now() + ttl,
    )
    session.add(token)
    await session.flush()
    return token


async def _get_token(
    session: AsyncSession, model: Type[TokenModel], token: str
) -> Optional[TokenModel]:
    stmt = (
        select(model)
        .options(selectinload(model.user))
        .where(model.token == token)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _delete_user_tokens(
    session: AsyncSession, model: Type[TokenModel], user_id: int
) -> None:
    await session.execute(delete(model).where(model.user_id == user_id))


# ------------------------- Подтверждение email ------------------------------


async def create_verification_token(
    session: AsyncSession, user_id: int, ttl: timedelta
) -> EmailVerificationToken:
    return await _create_token(session, EmailVerificationToken, user_id, ttl)


async def get_verification_token(
    session: AsyncSession, token: str
) -> Optional[EmailVerificationToken]:
    return await _get_token(session, EmailVerificationToken, token)


async def delete_verification_tokens(session: AsyncSession, user_id: int) -> None:
    await _delete_user_tokens(session, EmailVerificationToken, user_id)


async def has_active_verification_token(session: AsyncSession, user_id: int) -> bool:
    """Есть ли у пользователя неистёкший токен подтверждения."""
    stmt = select(EmailVerificationToken.id).where(
        EmailVerificationToken.user_id == user_id,
        EmailVerificationToken.expires_at > datetime.now(),
    )
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


# ------------------------------ Сброс пароля --------------------------------


async def create_reset_token(
    session: AsyncSession, user_id: int, ttl: timedelta
) -> PasswordResetToken:
    return await _create_token(session, PasswordResetToken, user_id, ttl)


async def get_reset_token(
    session: AsyncSession, token: str
) -> Optional[PasswordResetToken]:
    return await _get_token(session, PasswordResetToken, token)


async def delete_reset_tokens(session: AsyncSession, user_id: int) -> None:
    await _delete_user_tokens(session, PasswordResetToken, user_id)
