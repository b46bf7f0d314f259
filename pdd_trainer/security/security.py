# -*- coding: utf-8 -*-
"""security
~~~~~~~~~~~~
Хэширование паролей, JWT помощники и проверки доступа на основе ролей.

Ключевые моменты
================
* Пароли хэшируются *passlib* (bcrypt) явным вызовом **hash_password**,
  никаких неявных хуков на присваивание поля.
* JWT подписываются *python‑jose*; в payload кладутся id, email, роль и
  признак подтверждения email.
* **get_current_user** на каждый запрос загружает полную запись пользователя
  из БД; **require_roles** является фабрикой зависимостей FastAPI поверх неё.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from fastapi import Depends, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.clients.database_client import get_db
from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings
from pdd_trainer.domain.enums import Role
from pdd_trainer.domain.models import User
from pdd_trainer.repository.users import get_user_by_id
from pdd_trainer.utils.exceptions import (AuthenticationError, ErrorCode,
                                          PermissionDeniedError)

logger = configure_logger()

# Контекст для хэширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# ---------------------------------------------------------------------------
# Пароли
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """
    Хэшировать пароль.

    Args:
        password: Пароль в открытом виде

    Returns:
        Хэшированный пароль
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверить пароль.

    Args:
        plain_password: Пароль в открытом виде
        hashed_password: Хэшированный пароль

    Returns:
        True если пароль верный
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Повреждённый или неизвестный формат хэша
        logger.warning("Не удалось разобрать хэш пароля")
        return False


# ---------------------------------------------------------------------------
# JWT помощники
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "token_type": "access"})
    if "sub" in to_encode and not isinstance(to_encode["sub"], str):
        to_encode["sub"] = str(to_encode["sub"])
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_user_token(user: User) -> str:
    """Сессионный токен пользователя."""
    return create_access_token(
        {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "verified": user.is_verified,
        }
    )


def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        logger.warning(f"Ошибка проверки JWT: {exc}")
        raise AuthenticationError("Недействительный или истекший токен") from exc

    if payload.get("token_type") != "access":
        raise AuthenticationError("Неверный тип токена")
    if not payload.get("sub"):
        raise AuthenticationError("Неверный payload токена")
    return payload


# ---------------------------------------------------------------------------
# Зависимости FastAPI
# ---------------------------------------------------------------------------


def _extract_token(request: Request) -> str:
    auth: str | None = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise AuthenticationError("Отсутствует bearer токен")
    return auth.split(" ", 1)[1].strip()


async def get_current_user(
    request: Request, session: AsyncSession = Depends(get_db)
) -> User:
    """
    Получить текущего пользователя по bearer токену.

    Raises:
        AuthenticationError: Токен отсутствует, недействителен или пользователь удалён
    """
    payload = verify_token(_extract_token(request))
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Неверный payload токена") from exc

    user = await get_user_by_id(session, user_id)
    if user is None:
        logger.warning(f"Токен ссылается на несуществующего пользователя {user_id}")
        raise AuthenticationError("Пользователь не найден")
    if user.is_blocked:
        raise PermissionDeniedError(
            "Пользователь заблокирован", error_code=ErrorCode.USER_BLOCKED
        )
    return user


def require_roles(*allowed_roles: Role) -> Callable[..., Awaitable[User]]:
    allowed: set[Role] = set(allowed_roles)

    async def checker(request: Request, user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.warning(
                f"Доступ запрещен: пользователь {user.id} с ролью {user.role.value} пытался получить доступ к {request.url.path}"
            )
            raise PermissionDeniedError()
        return user

    return checker


# Удобные предустановки --------------------------------------------------------

authenticated = require_roles(Role.USER, Role.ADMIN)

admin_only = require_roles(Role.ADMIN)
