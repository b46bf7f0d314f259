# -*- coding: utf-8 -*-
"""
Этот модуль определяет пользовательские исключения для API ПДД Тренажёра.
Исключения несут HTTP статус, код ошибки и сообщение; обработчики в конце
модуля превращают их в единый JSON-конверт ошибки.
"""

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings

logger = configure_logger()


class ErrorCode(str, Enum):
    """Перечисление для уникальных кодов ошибок."""

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    BAD_REQUEST = "BAD_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    # Аутентификация
    EMAIL_EXISTS = "EMAIL_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    USER_BLOCKED = "USER_BLOCKED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_USED = "TOKEN_USED"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    # Попытки
    ATTEMPT_COMPLETED = "ATTEMPT_COMPLETED"
    NOT_ENOUGH_QUESTIONS = "NOT_ENOUGH_QUESTIONS"
    NO_QUESTIONS = "NO_QUESTIONS"


class APIException(HTTPException):
    """Базовый класс для пользовательских исключений API."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str,
        headers: dict | None = None,
        extra: dict[str, Any] | None = None,
    ):
        """
        Инициализирует APIException с кодом статуса, деталями и кодом ошибки.

        Args:
            status_code (int): HTTP код статуса.
            detail (str): Сообщение об ошибке.
            error_code (str): Уникальный код ошибки.
            headers (dict, optional): Дополнительные заголовки.
            extra (dict, optional): Дополнительные поля тела ответа.
        """
        super().__init__(status_code=status_code, headers=headers)
        self.detail = detail
        self.error_code = error_code
        self.extra = extra or {}


class NotFoundError(APIException):
    """Вызывается, когда ресурс не найден."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str | int | None = None,
        details: str | None = None,
        error_code: str = ErrorCode.NOT_FOUND,
    ):
        """
        Инициализирует NotFoundError.

        Args:
            resource_type (str): Тип ресурса (например, "User", "Topic").
            resource_id (str or int, optional): ID ресурса.
            details (str, optional): Дополнительные детали об ошибке.
        """
        detail = f"Не найдено: {resource_type}"
        if resource_id:
            detail = f"Не найдено: {resource_type} с ID {resource_id}"
        if details:
            detail = f"{detail}: {details}"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
        )


class ConflictError(APIException):
    """Вызывается, когда ресурс уже существует или состояние не допускает операцию."""

    def __init__(self, detail: str, error_code: str = ErrorCode.CONFLICT):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
        )


class PermissionDeniedError(APIException):
    """Вызывается, когда у пользователя недостаточно прав."""

    def __init__(
        self,
        detail: str = "Недостаточно прав",
        error_code: str = ErrorCode.PERMISSION_DENIED,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code,
            extra=extra,
        )


class ValidationError(APIException):
    """Вызывается, когда входные данные недействительны."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=ErrorCode.VALIDATION_ERROR,
        )


class BadRequestError(APIException):
    """Вызывается при нарушении бизнес-правила запроса (например, неверный токен)."""

    def __init__(self, detail: str, error_code: str = ErrorCode.BAD_REQUEST):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class AuthenticationError(APIException):
    """Вызывается при отсутствии или недействительности учётных данных."""

    def __init__(
        self,
        detail: str = "Требуется авторизация",
        error_code: str = ErrorCode.UNAUTHORIZED,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class EmailDeliveryError(APIException):
    """Вызывается, когда почтовый транспорт не смог отправить письмо."""

    def __init__(self, detail: str = "Не удалось отправить письмо"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=ErrorCode.EMAIL_DELIVERY_FAILED,
        )


# ---------------------------------------------------------------------------
# Обработчики исключений FastAPI
# ---------------------------------------------------------------------------


def _error_body(error_code: str, detail: str, **extra: Any) -> dict[str, Any]:
    body = {"success": False, "error_code": str(error_code), "detail": detail}
    body.update(extra)
    return body


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Рендерит APIException в конверт ошибки."""
    error_code = getattr(exc.error_code, "value", exc.error_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error_code, exc.detail, **exc.extra),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Рендерит обычные HTTPException (404 роутера, 405 и т.п.) в тот же конверт."""
    error_code = {
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorCode.PERMISSION_DENIED,
        status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
        status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    }.get(exc.status_code, ErrorCode.BAD_REQUEST)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error_code.value, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Неклассифицированные ошибки: пишем traceback, клиенту отдаём общее сообщение."""
    logger.opt(exception=exc).error(
        f"💥 Необработанная ошибка: {request.method} {request.url.path}"
    )
    extra: dict[str, Any] = {}
    if not settings.is_production:
        extra["details"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(ErrorCode.INTERNAL_ERROR.value, "Ошибка сервера", **extra),
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Ошибки валидации тела/параметров запроса."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            ErrorCode.VALIDATION_ERROR.value,
            "Некорректные данные запроса",
            errors=jsonable_encoder(exc.errors()),
        ),
    )
