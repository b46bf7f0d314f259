# -*- coding: utf-8 -*-
"""
Маршруты FastAPI для подтверждения email и восстановления пароля.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pdd_trainer.service.auth import AuthService
from pdd_trainer.utils.exceptions import BadRequestError, ErrorCode

from ..dependencies import get_auth_service
from ..schemas import MessageResponse, SuccessResponse
from .schemas import (EmailSchema, ResetPasswordSchema, TokenSchema,
                      VerifyEmailDataSchema)

router = APIRouter()


async def _verify(service: AuthService, token: Optional[str]) -> dict:
    if not token:
        raise BadRequestError("Токен не передан", error_code=ErrorCode.INVALID_TOKEN)
    result = await service.verify_email(token)
    message = (
        "Email уже подтверждён"
        if result["already_verified"]
        else "Email успешно подтверждён"
    )
    return {
        "message": message,
        "data": {
            "email": result["user"].email,
            "already_verified": result["already_verified"],
        },
    }


@router.get("/verify-email", response_model=SuccessResponse[VerifyEmailDataSchema])
async def verify_email_by_query(
    token: Optional[str] = Query(None, description="Токен из письма"),
    service: AuthService = Depends(get_auth_service),
):
    """
    Подтверждает email по ссылке из письма.

    Исключения:
        * 400 INVALID_TOKEN ― токен неизвестен.
        * 400 TOKEN_EXPIRED ― срок действия токена истёк.
    """
    return await _verify(service, token)


@router.get(
    "/verify-email/{token}", response_model=SuccessResponse[VerifyEmailDataSchema]
)
async def verify_email_by_path(
    token: str, service: AuthService = Depends(get_auth_service)
):
    """Подтверждает email, токен передан в пути."""
    return await _verify(service, token)


@router.post("/verify-email", response_model=SuccessResponse[VerifyEmailDataSchema])
async def verify_email_by_body(
    payload: TokenSchema, service: AuthService = Depends(get_auth_service)
):
    """Подтверждает email, токен передан в теле запроса."""
    return await _verify(service, payload.token)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    payload: EmailSchema, service: AuthService = Depends(get_auth_service)
):
    """
    Повторно отправляет письмо для подтверждения email.

    Исключения:
        * 404 USER_NOT_FOUND ― пользователь не найден.
        * 409 ALREADY_VERIFIED ― email уже подтверждён.
    """
    await service.resend_verification(payload.email)
    return {"message": "Письмо для подтверждения отправлено повторно"}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: EmailSchema, service: AuthService = Depends(get_auth_service)
):
    """Отправляет ссылку для сброса пароля. Ответ не раскрывает наличие аккаунта."""
    message = await service.forgot_password(payload.email)
    return {"message": message}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordSchema, service: AuthService = Depends(get_auth_service)
):
    """
    Устанавливает новый пароль по одноразовому токену.

    Исключения:
        * 400 INVALID_TOKEN ― токен неизвестен.
        * 409 TOKEN_USED ― токен уже использован.
        * 400 TOKEN_EXPIRED ― срок действия токена истёк.
    """
    await service.reset_password(payload.token, payload.new_password)
    return {"message": "Пароль успешно изменён"}
