# -*- coding: utf-8 -*-
"""
pdd_trainer/service/users.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой для операций с пользователями.
"""

from typing import Any, Dict, List

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.enums import Role, TestAttemptStatus, TestType
from pdd_trainer.domain.models import Question, TestAttempt, Topic, User
from pdd_trainer.repository.base import count_items, list_items
from pdd_trainer.service.files import build_file_url, delete_image, save_image


def format_user_for_response(user: User) -> Dict[str, Any]:
    """Профиль пользователя для ответа API."""
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "is_verified": user.is_verified,
        "avatar_url": build_file_url(user.avatar, "avatar"),
        "created_at": user.created_at,
    }


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upload_avatar(self, user: User, file: UploadFile) -> str:
        """
        Сохранить новый аватар пользователя, удалив предыдущий файл.

        Returns:
            Публичный URL аватара
        """
        filename = await save_image(file, "avatar")
        previous = user.avatar

        user.avatar = filename
        await self.session.commit()

        if previous:
            delete_image(previous, "avatar")
        logger.info(f"Пользователь {user.id} обновил аватар")
        return build_file_url(filename, "avatar")

    async def list_users(self, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        users = await list_items(self.session, User, skip=skip, limit=limit)
        return [format_user_for_response(user) for user in users]

    async def get_admin_stats(self) -> Dict[str, int]:
        """Сводные показатели для панели администратора."""
        session = self.session
        return {
            "users": await count_items(session, User),
            "verified_users": await count_items(session, User, is_verified=True),
            "admins": await count_items(session, User, role=Role.ADMIN),
            "topics": await count_items(session, Topic),
            "questions": await count_items(session, Question),
            "attempts": await count_items(session, TestAttempt),
            "passed_attempts": await count_items(
                session, TestAttempt, status=TestAttemptStatus.PASSED
            ),
            "failed_attempts": await count_items(
                session, TestAttempt, status=TestAttemptStatus.FAILED
            ),
            "exam_attempts": await count_items(
                session, TestAttempt, test_type=TestType.EXAM
            ),
        }
