# -*- coding: utf-8 -*-
"""
Integration тесты для API тренировок по темам
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.fixtures import (auth_headers, build_answer_key,
                            create_test_questions, create_test_topic,
                            create_test_user)


class TestTopicsAPI:
    """Integration тесты API тем"""

    @pytest.mark.asyncio
    async def test_list_topics(self, async_client: AsyncClient, test_session: AsyncSession):
        user = await create_test_user(test_session)
        topic = await create_test_topic(test_session)
        await create_test_questions(test_session, topic, count=3)

        response = await async_client.get("/api/topics", headers=auth_headers(user))

        assert response.status_code == 200
        [item] = response.json()["data"]
        assert item["id"] == topic.id
        assert item["status"] == "not_started"
        assert item["questions_count"] == 3

    @pytest.mark.asyncio
    async def test_topic_training_flow(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        """Старт, ответы, завершение и результаты тренировки по теме"""
        # Arrange
        user = await create_test_user(test_session)
        topic = await create_test_topic(test_session)
        questions = await create_test_questions(test_session, topic, count=4)
        key = build_answer_key(questions)
        headers = auth_headers(user)

        # Act
        response = await async_client.post(f"/api/topics/{topic.id}/start", headers=headers)
        assert response.status_code == 200
        started = response.json()["data"]
        base = f"/api/topics/{topic.id}/attempt/{started['attempt_id']}"

        for index, question in enumerate(started["questions"]):
            correct_id, wrong_id = key[question["id"]]
            response = await async_client.post(
                f"{base}/answer",
                json={
                    "question_id": question["id"],
                    "answer_id": wrong_id if index == 0 else correct_id,
                },
                headers=headers,
            )
            assert response.status_code == 200
        answer_result = response.json()["data"]

        state = (await async_client.get(base, headers=headers)).json()["data"]
        finish = await async_client.post(f"{base}/finish", headers=headers)
        again = await async_client.post(f"{base}/finish", headers=headers)
        results = await async_client.get(f"{base}/results", headers=headers)
        topics = await async_client.get("/api/topics", headers=headers)

        # Assert
        assert answer_result["progress"] == {"questions_answered": 4, "correct_answers": 3}
        assert state["progress"] == {"answered": 4, "total": 4}

        assert finish.status_code == 200
        assert finish.json()["message"] == "Тема пройдена"
        assert finish.json()["data"]["correct_answers"] == 3
        assert finish.json()["data"]["required_correct"] == 3

        assert again.status_code == 409
        assert again.json()["error_code"] == "ATTEMPT_COMPLETED"

        assert len(results.json()["data"]["results"]) == 4

        [item] = topics.json()["data"]
        assert item["status"] == "passed"
        assert item["questions_answered"] == 4
        assert item["correct_answers"] == 3
        assert item["last_attempt_id"] == started["attempt_id"]
        assert item["last_attempt_at"] is not None

    @pytest.mark.asyncio
    async def test_start_empty_topic(self, async_client: AsyncClient, test_session: AsyncSession):
        user = await create_test_user(test_session)
        topic = await create_test_topic(test_session)

        response = await async_client.post(
            f"/api/topics/{topic.id}/start", headers=auth_headers(user)
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_QUESTIONS"

    @pytest.mark.asyncio
    async def test_start_unknown_topic(self, async_client: AsyncClient, test_session: AsyncSession):
        user = await create_test_user(test_session)

        response = await async_client.post("/api/topics/999/start", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json()["detail"] == "Не найдено: тема с ID 999"
