# -*- coding: utf-8 -*-
"""
pdd_trainer/service/auth.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой аутентификации: регистрация, подтверждение email, вход,
восстановление и смена пароля.

Каждый публичный метод выполняет один рабочий процесс и фиксирует
транзакцию единожды в конце; при исключении сессия откатывается
зависимостью ``get_db``.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings
from pdd_trainer.domain.models import User
from pdd_trainer.repository import tokens as token_repo
from pdd_trainer.repository.users import (create_user,
                                          delete_user_with_dependencies,
                                          get_user_by_email,
                                          update_user_password)
from pdd_trainer.security.security import (create_user_token, hash_password,
                                           verify_password)
from pdd_trainer.service.email import EmailService
from pdd_trainer.utils.exceptions import (AuthenticationError,
                                          BadRequestError, ConflictError,
                                          EmailDeliveryError, ErrorCode,
                                          NotFoundError,
                                          PermissionDeniedError,
                                          ValidationError)

logger = configure_logger()

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN_LENGTH = 6
# Ограничение bcrypt
PASSWORD_MAX_LENGTH = 72

FORGOT_PASSWORD_MESSAGE = (
    "Если аккаунт с таким email существует, на него отправлена ссылка для сброса пароля"
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    """
    Проверить формат email и вернуть нормализованное значение.

    Raises:
        ValidationError: Email не похож на адрес вида local@domain.tld
    """
    normalized = normalize_email(email)
    if not EMAIL_PATTERN.match(normalized):
        raise ValidationError("Некорректный формат email")
    return normalized


def validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Пароль должен содержать минимум {PASSWORD_MIN_LENGTH} символов"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Пароль должен содержать не более {PASSWORD_MAX_LENGTH} символов"
        )


@dataclass
class LoginResult:
    token: str
    user: User


class AuthService:
    """Рабочие процессы аутентификации поверх одной сессии БД."""

    def __init__(self, session: AsyncSession, email_service: EmailService):
        self.session = session
        self.email_service = email_service

    # ------------------------------------------------------------------ регистрация

    async def register(self, email: str, password: str) -> User:
        """
        Зарегистрировать пользователя и отправить письмо для подтверждения.

        Args:
            email: Email пользователя
            password: Пароль в открытом виде

        Returns:
            Созданный неподтверждённый пользователь

        Raises:
            ValidationError: Некорректный email или пароль
            ConflictError: Email уже занят подтверждённым аккаунтом (EMAIL_EXISTS)
            EmailDeliveryError: Письмо не удалось отправить
        """
        email = validate_email(email)
        validate_password(password)

        existing = await get_user_by_email(self.session, email)
        if existing is not None:
            if existing.is_verified:
                logger.warning(f"Повторная регистрация подтверждённого email {email}")
                raise ConflictError(
                    "Пользователь с таким email уже существует",
                    error_code=ErrorCode.EMAIL_EXISTS,
                )
            logger.info(f"Удаляем неподтверждённый аккаунт {email} перед регистрацией")
            await delete_user_with_dependencies(self.session, existing)

        user = await create_user(self.session, email, hash_password(password))
        token = await token_repo.create_verification_token(
            self.session,
            user.id,
            timedelta(hours=settings.verification_token_ttl_hours),
        )
        # Аккаунт фиксируется только после передачи письма транспорту
        try:
            await self.email_service.send_verification_email(user.email, token.token)
        except EmailDeliveryError:
            await self.session.rollback()
            logger.error(f"Регистрация {email} отменена: письмо не отправлено")
            raise
        await self.session.commit()

        logger.info(f"✅ Зарегистрирован пользователь {user.email} (ID: {user.id})")
        return user

    async def verify_email(self, token: str) -> Dict[str, Any]:
        """
        Подтвердить email по токену из письма.

        Повторное подтверждение уже подтверждённого аккаунта успешно.

        Raises:
            BadRequestError: Токен неизвестен (INVALID_TOKEN) или истёк (TOKEN_EXPIRED)
        """
        record = await token_repo.get_verification_token(self.session, token)
        if record is None:
            raise BadRequestError(
                "Недействительный токен подтверждения", error_code=ErrorCode.INVALID_TOKEN
            )

        user = record.user
        if record.expires_at < datetime.now():
            await self.session.delete(record)
            await self.session.commit()
            logger.info(f"Истёкший токен подтверждения пользователя {user.id} удалён")
            raise BadRequestError(
                "Срок действия ссылки истёк, запросите новое письмо",
                error_code=ErrorCode.TOKEN_EXPIRED,
            )

        # Токен живёт до истечения срока: повторный переход по ссылке успешен
        already_verified = user.is_verified
        if not already_verified:
            user.is_verified = True
            await self.session.commit()
            logger.info(f"✅ Email {user.email} подтверждён")
        return {"user": user, "already_verified": already_verified}

    async def resend_verification(self, email: str) -> None:
        """
        Выдать новый токен подтверждения и отправить письмо повторно.

        Raises:
            NotFoundError: Пользователь не найден (USER_NOT_FOUND)
            ConflictError: Email уже подтверждён (ALREADY_VERIFIED)
        """
        user = await get_user_by_email(self.session, email)
        if user is None:
            raise NotFoundError("пользователь", error_code=ErrorCode.USER_NOT_FOUND)
        if user.is_verified:
            raise ConflictError(
                "Email уже подтверждён", error_code=ErrorCode.ALREADY_VERIFIED
            )

        await token_repo.delete_verification_tokens(self.session, user.id)
        token = await token_repo.create_verification_token(
            self.session,
            user.id,
            timedelta(hours=settings.verification_token_ttl_hours),
        )
        await self.email_service.send_verification_email(user.email, token.token)
        await self.session.commit()
        logger.info(f"Письмо подтверждения повторно отправлено на {user.email}")

    # ------------------------------------------------------------------------ вход

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Проверить учётные данные и выдать JWT.

        Raises:
            AuthenticationError: Неверный email или пароль (INVALID_CREDENTIALS)
            PermissionDeniedError: Email не подтверждён или пользователь заблокирован
        """
        user = await get_user_by_email(self.session, email)
        if user is None:
            logger.warning(f"Неудачная попытка входа: пользователь {email} не найден")
            raise AuthenticationError(
                "Неверный email или пароль", error_code=ErrorCode.INVALID_CREDENTIALS
            )

        if not user.is_verified:
            has_active_token = await token_repo.has_active_verification_token(
                self.session, user.id
            )
            raise PermissionDeniedError(
                "Email не подтверждён. Проверьте почту",
                error_code=ErrorCode.EMAIL_NOT_VERIFIED,
                extra={"has_active_token": has_active_token},
            )

        if user.is_blocked:
            raise PermissionDeniedError(
                "Пользователь заблокирован", error_code=ErrorCode.USER_BLOCKED
            )

        if not verify_password(password, user.password_hash):
            logger.warning(f"Неудачная попытка входа: неверный пароль для {user.email}")
            raise AuthenticationError(
                "Неверный email или пароль", error_code=ErrorCode.INVALID_CREDENTIALS
            )

        logger.info(f"Пользователь {user.email} (ID: {user.id}) успешно авторизовался")
        return LoginResult(token=create_user_token(user), user=user)

    # ---------------------------------------------------------------------- пароли

    async def forgot_password(self, email: str) -> str:
        """
        Отправить ссылку для сброса пароля.

        Ответ одинаков независимо от существования аккаунта.
        """
        user = await get_user_by_email(self.session, email)
        if user is None:
            logger.info(f"Запрос сброса пароля для неизвестного email {email}")
            return FORGOT_PASSWORD_MESSAGE

        await token_repo.delete_reset_tokens(self.session, user.id)
        token = await token_repo.create_reset_token(
            self.session,
            user.id,
            timedelta(minutes=settings.reset_token_ttl_minutes),
        )
        await self.email_service.send_password_reset_email(user.email, token.token)
        await self.session.commit()
        logger.info(f"Ссылка сброса пароля отправлена на {user.email}")
        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Установить новый пароль по одноразовому токену.

        Raises:
            ValidationError: Новый пароль не прошёл проверку
            BadRequestError: Токен неизвестен (INVALID_TOKEN) или истёк (TOKEN_EXPIRED)
            ConflictError: Токен уже использован (TOKEN_USED)
        """
        validate_password(new_password)

        record = await token_repo.get_reset_token(self.session, token)
        if record is None:
            raise BadRequestError(
                "Недействительный токен сброса пароля", error_code=ErrorCode.INVALID_TOKEN
            )
        if record.is_used:
            raise ConflictError(
                "Ссылка для сброса пароля уже использована", error_code=ErrorCode.TOKEN_USED
            )
        if record.expires_at < datetime.now():
            raise BadRequestError(
                "Срок действия ссылки истёк", error_code=ErrorCode.TOKEN_EXPIRED
            )

        await update_user_password(self.session, record.user, hash_password(new_password))
        record.is_used = True
        await self.session.commit()
        logger.info(f"Пароль пользователя {record.user.email} сброшен")

    async def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> None:
        """
        Сменить пароль авторизованного пользователя.

        Raises:
            BadRequestError: Текущий пароль неверен (INVALID_PASSWORD)
            ValidationError: Новый пароль не прошёл проверку
        """
        if not verify_password(current_password, user.password_hash):
            raise BadRequestError(
                "Текущий пароль неверен", error_code=ErrorCode.INVALID_PASSWORD
            )
        validate_password(new_password)

        await update_user_password(self.session, user, hash_password(new_password))
        await self.session.commit()
        logger.info(f"Пользователь {user.email} сменил пароль")
