# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/exam/routes.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Маршруты FastAPI для экзамена.
"""

from fastapi import APIRouter, Depends

from pdd_trainer.domain.models import User
from pdd_trainer.security.security import authenticated
from pdd_trainer.service.exam import ExamService

from ..dependencies import get_exam_service
from ..schemas import SubmitAnswerSchema, SuccessResponse
from .schemas import (AdditionalQuestionsSchema, ExamAnswerResultSchema,
                      ExamFinishSchema, ExamResultsSchema, ExamStartSchema,
                      UserStatsSchema)

router = APIRouter()


@router.post("/start", response_model=SuccessResponse[ExamStartSchema])
async def start_exam(
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """
    Начинает экзамен: 20 случайных вопросов без признаков правильности.

    Исключения:
        * 409 NOT_ENOUGH_QUESTIONS ― в базе меньше 20 вопросов.
    """
    return {"data": await service.start_exam(user)}


@router.get("/stats", response_model=SuccessResponse[UserStatsSchema])
async def get_user_stats(
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """Статистика пользователя по завершённым попыткам."""
    return {"data": await service.get_user_stats(user)}


@router.post(
    "/{attempt_id}/answer", response_model=SuccessResponse[ExamAnswerResultSchema]
)
async def submit_answer(
    attempt_id: int,
    payload: SubmitAnswerSchema,
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """
    Принимает ответ на вопрос экзамена.

    После ответа на все базовые вопросы при 1 или 2 ошибках в ответе
    приходят дополнительные вопросы (5 или 10).

    Исключения:
        * 404 NOT_FOUND ― попытка или вариант ответа не найдены.
        * 409 ATTEMPT_COMPLETED ― попытка уже завершена.
    """
    result = await service.submit_answer(
        user, attempt_id, payload.question_id, payload.answer_id
    )
    return {"data": result}


@router.post(
    "/{attempt_id}/request-additional",
    response_model=SuccessResponse[AdditionalQuestionsSchema],
)
async def request_additional_questions(
    attempt_id: int,
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """
    Выдаёт дополнительные вопросы, если попытка на них имеет право.

    Исключения:
        * 409 CONFLICT ― продление не положено или уже выдано.
    """
    return {"data": await service.request_additional_questions(user, attempt_id)}


@router.post("/{attempt_id}/finish", response_model=SuccessResponse[ExamFinishSchema])
async def finish_exam(
    attempt_id: int,
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """
    Завершает экзамен.

    Исключения:
        * 409 ATTEMPT_COMPLETED ― попытка уже завершена.
    """
    result = await service.finish_exam(user, attempt_id)
    message = "Экзамен сдан" if result["passed"] else "Экзамен не сдан"
    return {"message": message, "data": result}


@router.get(
    "/{attempt_id}/results", response_model=SuccessResponse[ExamResultsSchema]
)
async def get_exam_results(
    attempt_id: int,
    user: User = Depends(authenticated),
    service: ExamService = Depends(get_exam_service),
):
    """Результаты попытки с разбором каждого ответа."""
    return {"data": await service.get_results(user, attempt_id)}
