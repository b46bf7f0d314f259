# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/topics/routes.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Маршруты FastAPI для тренировок по темам.
"""

from typing import List

from fastapi import APIRouter, Depends

from pdd_trainer.domain.models import User
from pdd_trainer.security.security import authenticated
from pdd_trainer.service.topics import TopicService

from ..dependencies import get_topic_service
from ..schemas import SubmitAnswerSchema, SuccessResponse
from .schemas import (TopicAnswerResultSchema, TopicAttemptSchema,
                      TopicFinishSchema, TopicResultsSchema, TopicStartSchema,
                      TopicWithProgressSchema)

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[TopicWithProgressSchema]])
async def list_topics(
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """Все темы с прогрессом текущего пользователя."""
    return {"data": await service.get_topics_with_progress(user)}


@router.post("/{topic_id}/start", response_model=SuccessResponse[TopicStartSchema])
async def start_topic_test(
    topic_id: int,
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """
    Начинает тренировку по теме.

    Исключения:
        * 404 NOT_FOUND ― тема не найдена.
        * 409 NO_QUESTIONS ― в теме нет вопросов.
    """
    return {"data": await service.start_topic_test(user, topic_id)}


@router.get(
    "/{topic_id}/attempt/{attempt_id}",
    response_model=SuccessResponse[TopicAttemptSchema],
)
async def get_attempt(
    topic_id: int,
    attempt_id: int,
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """Состояние попытки: вопросы и количество данных ответов."""
    return {"data": await service.get_attempt(user, topic_id, attempt_id)}


@router.post(
    "/{topic_id}/attempt/{attempt_id}/answer",
    response_model=SuccessResponse[TopicAnswerResultSchema],
)
async def submit_answer(
    topic_id: int,
    attempt_id: int,
    payload: SubmitAnswerSchema,
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """
    Принимает ответ на вопрос темы.

    Исключения:
        * 404 NOT_FOUND ― попытка, вопрос темы или вариант ответа не найдены.
        * 409 ATTEMPT_COMPLETED ― попытка уже завершена.
    """
    result = await service.submit_answer(
        user, topic_id, attempt_id, payload.question_id, payload.answer_id
    )
    return {"data": result}


@router.post(
    "/{topic_id}/attempt/{attempt_id}/finish",
    response_model=SuccessResponse[TopicFinishSchema],
)
async def finish_attempt(
    topic_id: int,
    attempt_id: int,
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """
    Завершает попытку: зачёт от 70% правильных ответов.

    Исключения:
        * 409 ATTEMPT_COMPLETED ― попытка уже завершена.
    """
    result = await service.finish_attempt(user, topic_id, attempt_id)
    message = "Тема пройдена" if result["passed"] else "Тема не пройдена"
    return {"message": message, "data": result}


@router.get(
    "/{topic_id}/attempt/{attempt_id}/results",
    response_model=SuccessResponse[TopicResultsSchema],
)
async def get_attempt_results(
    topic_id: int,
    attempt_id: int,
    user: User = Depends(authenticated),
    service: TopicService = Depends(get_topic_service),
):
    """Итоги попытки по теме с разбором ответов."""
    return {"data": await service.get_attempt_results(user, topic_id, attempt_id)}
