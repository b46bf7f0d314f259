# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/users/routes.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Маршруты FastAPI для пользователей: регистрация, вход, профиль.
"""

from typing import List

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.domain.models import User
from pdd_trainer.security.security import admin_only, authenticated
from pdd_trainer.service.auth import AuthService
from pdd_trainer.service.users import UserService, format_user_for_response

from ..dependencies import get_auth_service, get_user_service
from ..schemas import MessageResponse, SuccessResponse
from .schemas import (AdminStatsSchema, AvatarSchema, ChangePasswordSchema,
                      LoginDataSchema, LoginSchema, RegisterSchema,
                      UserReadSchema)

router = APIRouter()
logger = configure_logger()


@router.post(
    "/register",
    response_model=SuccessResponse[UserReadSchema],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterSchema,
    service: AuthService = Depends(get_auth_service),
):
    """
    Регистрирует пользователя и отправляет письмо для подтверждения email.

    Токен сессии не выдаётся: войти можно только после подтверждения.

    Исключения:
        * 409 EMAIL_EXISTS ― email занят подтверждённым аккаунтом.
        * 422 VALIDATION_ERROR ― некорректный email или пароль.
    """
    user = await service.register(payload.email, payload.password)
    return {
        "message": "Регистрация успешна. Проверьте почту для подтверждения email",
        "data": format_user_for_response(user),
    }


@router.post("/login", response_model=SuccessResponse[LoginDataSchema])
async def login(
    credentials: LoginSchema,
    service: AuthService = Depends(get_auth_service),
):
    """
    Аутентифицирует пользователя и возвращает JWT-токен.

    Исключения:
        * 401 INVALID_CREDENTIALS ― неверный email или пароль.
        * 403 EMAIL_NOT_VERIFIED ― email не подтверждён.
        * 403 USER_BLOCKED ― пользователь заблокирован.
    """
    result = await service.login(credentials.email, credentials.password)
    return {
        "data": {
            "token": result.token,
            "token_type": "bearer",
            "user": format_user_for_response(result.user),
        }
    }


@router.get("/me", response_model=SuccessResponse[UserReadSchema])
async def read_current_user(user: User = Depends(authenticated)):
    """Возвращает профиль текущего пользователя."""
    return {"data": format_user_for_response(user)}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordSchema,
    user: User = Depends(authenticated),
    service: AuthService = Depends(get_auth_service),
):
    """
    Меняет пароль текущего пользователя.

    Исключения:
        * 400 INVALID_PASSWORD ― текущий пароль неверен.
    """
    await service.change_password(user, payload.current_password, payload.new_password)
    return {"message": "Пароль успешно изменён"}


@router.post("/upload-avatar", response_model=SuccessResponse[AvatarSchema])
async def upload_avatar(
    avatar: UploadFile = File(..., description="Изображение JPEG/PNG/WEBP/GIF до 2 МБ"),
    user: User = Depends(authenticated),
    service: UserService = Depends(get_user_service),
):
    """Загружает аватар пользователя, заменяя предыдущий."""
    avatar_url = await service.upload_avatar(user, avatar)
    return {"message": "Аватар обновлён", "data": {"avatar_url": avatar_url}}


@router.get("", response_model=SuccessResponse[List[UserReadSchema]])
async def list_users(
    skip: int = Query(0, ge=0, description="Количество пропускаемых записей"),
    limit: int = Query(100, ge=1, le=1000, description="Максимальное количество записей"),
    admin: User = Depends(admin_only),
    service: UserService = Depends(get_user_service),
):
    """Список пользователей (только для администратора)."""
    users = await service.list_users(skip=skip, limit=limit)
    logger.info(f"Администратор {admin.id} запросил список пользователей: {len(users)}")
    return {"data": users}


@router.get("/admin-stats", response_model=SuccessResponse[AdminStatsSchema])
async def admin_stats(
    admin: User = Depends(admin_only),
    service: UserService = Depends(get_user_service),
):
    """Сводная статистика для панели администратора."""
    return {"data": await service.get_admin_stats()}
