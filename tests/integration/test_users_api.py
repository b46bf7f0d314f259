# -*- coding: utf-8 -*-
"""
Integration тесты для API профиля, администрирования и банка вопросов
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.fixtures import (auth_headers, create_test_admin,
                            create_test_questions, create_test_topic,
                            create_test_user)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestAvatarAPI:
    """Загрузка аватара"""

    @pytest.mark.asyncio
    async def test_upload_avatar(self, async_client: AsyncClient, test_session: AsyncSession):
        """Аватар сохраняется, раздаётся по /uploads и попадает в профиль"""
        # Arrange
        user = await create_test_user(test_session)
        headers = auth_headers(user)

        # Act
        response = await async_client.post(
            "/api/users/upload-avatar",
            files={"avatar": ("me.png", PNG_BYTES, "image/png")},
            headers=headers,
        )

        # Assert
        assert response.status_code == 200
        avatar_url = response.json()["data"]["avatar_url"]
        assert avatar_url.startswith("http://testserver/uploads/avatars/")
        assert avatar_url.endswith(".png")

        served = await async_client.get(avatar_url.replace("http://testserver", ""))
        assert served.status_code == 200
        assert served.content == PNG_BYTES

        profile = await async_client.get("/api/users/me", headers=headers)
        assert profile.json()["data"]["avatar_url"] == avatar_url

    @pytest.mark.asyncio
    async def test_upload_avatar_wrong_type(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        user = await create_test_user(test_session)

        response = await async_client.post(
            "/api/users/upload-avatar",
            files={"avatar": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers(user),
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestAdminAPI:
    """Эндпоинты администратора"""

    @pytest.mark.asyncio
    async def test_list_users_admin_only(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        user = await create_test_user(test_session)
        admin = await create_test_admin(test_session)

        forbidden = await async_client.get("/api/users", headers=auth_headers(user))
        allowed = await async_client.get("/api/users", headers=auth_headers(admin))

        assert forbidden.status_code == 403
        assert forbidden.json()["error_code"] == "PERMISSION_DENIED"
        assert allowed.status_code == 200
        assert {item["email"] for item in allowed.json()["data"]} == {
            user.email,
            admin.email,
        }

    @pytest.mark.asyncio
    async def test_admin_stats(self, async_client: AsyncClient, test_session: AsyncSession):
        admin = await create_test_admin(test_session)
        await create_test_user(test_session, is_verified=False)
        topic = await create_test_topic(test_session)
        await create_test_questions(test_session, topic, count=2)

        response = await async_client.get(
            "/api/users/admin-stats", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["users"] == 2
        assert data["verified_users"] == 1
        assert data["admins"] == 1
        assert data["topics"] == 1
        assert data["questions"] == 2
        assert data["attempts"] == 0


class TestQuestionsAPI:
    """Управление вопросами"""

    @pytest.mark.asyncio
    async def test_create_question(self, async_client: AsyncClient, test_session: AsyncSession):
        """Администратор создаёт вопрос с единственным правильным ответом"""
        # Arrange
        admin = await create_test_admin(test_session)
        topic = await create_test_topic(test_session)
        payload = {
            "topic_id": topic.id,
            "text": "Что означает мигающий жёлтый сигнал?",
            "answers": [
                {"text": "Нерегулируемый перекрёсток", "is_correct": True},
                {"text": "Запрещает движение", "is_correct": False},
            ],
        }

        # Act
        response = await async_client.post(
            "/api/questions", json=payload, headers=auth_headers(admin)
        )

        # Assert
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["topic_id"] == topic.id
        assert [answer["is_correct"] for answer in data["answers"]] == [True, False]
        assert topic.questions_count == 1

    @pytest.mark.asyncio
    async def test_create_question_two_correct(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        admin = await create_test_admin(test_session)
        topic = await create_test_topic(test_session)
        payload = {
            "topic_id": topic.id,
            "text": "Вопрос",
            "answers": [
                {"text": "Да", "is_correct": True},
                {"text": "Тоже да", "is_correct": True},
            ],
        }

        response = await async_client.post(
            "/api/questions", json=payload, headers=auth_headers(admin)
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_question_requires_admin(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        user = await create_test_user(test_session)
        topic = await create_test_topic(test_session)

        response = await async_client.post(
            "/api/questions",
            json={
                "topic_id": topic.id,
                "text": "Вопрос",
                "answers": [
                    {"text": "Да", "is_correct": True},
                    {"text": "Нет", "is_correct": False},
                ],
            },
            headers=auth_headers(user),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_upload_question_image(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        admin = await create_test_admin(test_session)
        topic = await create_test_topic(test_session)
        [question] = await create_test_questions(test_session, topic, count=1)

        response = await async_client.post(
            f"/api/questions/{question.id}/image",
            files={"image": ("sign.jpeg", PNG_BYTES, "image/jpeg")},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        image_url = response.json()["data"]["image_url"]
        assert image_url.startswith("http://testserver/uploads/questions/")
        assert image_url.endswith(".jpg")
        assert question.image_url == image_url.rsplit("/", 1)[1]
