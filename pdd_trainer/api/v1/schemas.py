# -*- coding: utf-8 -*-
"""Общие pydantic-схемы ответов API."""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """Конверт успешного ответа."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Вопросы в попытках
# ---------------------------------------------------------------------------


class AnswerOptionSchema(BaseModel):
    id: int
    text: str


class AttemptQuestionSchema(BaseModel):
    """Вопрос без признаков правильности вариантов."""

    id: int
    text: str
    image_url: Optional[str] = None
    answers: List[AnswerOptionSchema]


class AnswerBreakdownSchema(BaseModel):
    question_id: int
    question_text: str
    image_url: Optional[str] = None
    answer_id: int
    answer_text: str
    is_correct: bool
    correct_answer_id: Optional[int] = None
    correct_answer_text: Optional[str] = None


class SubmitAnswerSchema(BaseModel):
    question_id: int
    answer_id: int

    class Config:
        json_schema_extra = {"example": {"question_id": 12, "answer_id": 47}}
