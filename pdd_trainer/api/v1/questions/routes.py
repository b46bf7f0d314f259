# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/questions/routes.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Маршруты FastAPI для управления вопросами (только администратор).
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.domain.models import User
from pdd_trainer.security.security import admin_only
from pdd_trainer.service.questions import QuestionService, question_image_url

from ..dependencies import get_question_service
from ..schemas import SuccessResponse
from .schemas import (QuestionCreateSchema, QuestionImageSchema,
                      QuestionReadSchema)

router = APIRouter()
logger = configure_logger()


@router.post(
    "",
    response_model=SuccessResponse[QuestionReadSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    payload: QuestionCreateSchema,
    admin: User = Depends(admin_only),
    service: QuestionService = Depends(get_question_service),
):
    """
    Создаёт вопрос с вариантами ответов.

    Исключения:
        * 404 NOT_FOUND ― тема не найдена.
        * 422 VALIDATION_ERROR ― меньше двух вариантов или правильный вариант не единственный.
    """
    question = await service.create_question(
        topic_id=payload.topic_id,
        text=payload.text,
        answers=[item.model_dump() for item in payload.answers],
        is_hard=payload.is_hard,
    )
    logger.info(f"Администратор {admin.id} создал вопрос {question.id}")
    return {
        "message": "Вопрос создан",
        "data": {
            "id": question.id,
            "topic_id": question.topic_id,
            "text": question.text,
            "is_hard": question.is_hard,
            "image_url": question_image_url(question),
            "created_at": question.created_at,
            "answers": [
                {"id": answer.id, "text": answer.text, "is_correct": answer.is_correct}
                for answer in question.answers
            ],
        },
    }


@router.post("/{question_id}/image", response_model=SuccessResponse[QuestionImageSchema])
async def upload_question_image(
    question_id: int,
    image: UploadFile = File(..., description="Изображение JPEG/PNG/WEBP/GIF до 5 МБ"),
    admin: User = Depends(admin_only),
    service: QuestionService = Depends(get_question_service),
):
    """
    Загружает изображение вопроса.

    Исключения:
        * 404 NOT_FOUND ― вопрос не найден.
        * 422 VALIDATION_ERROR ― неподдерживаемый тип или слишком большой файл.
    """
    image_url = await service.upload_image(question_id, image)
    return {"message": "Изображение загружено", "data": {"image_url": image_url}}
