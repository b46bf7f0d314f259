# -*- coding: utf-8 -*-
"""Pydantic schemas for question endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AnswerCreateSchema(BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreateSchema(BaseModel):
    topic_id: int
    text: str
    is_hard: bool = False
    answers: List[AnswerCreateSchema] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "topic_id": 1,
                "text": "Что означает мигающий жёлтый сигнал светофора?",
                "is_hard": False,
                "answers": [
                    {"text": "Нерегулируемый перекрёсток", "is_correct": True},
                    {"text": "Запрещает движение", "is_correct": False},
                ],
            }
        }


class AnswerReadSchema(BaseModel):
    id: int
    text: str
    is_correct: bool

    class Config:
        from_attributes = True


class QuestionReadSchema(BaseModel):
    id: int
    topic_id: int
    text: str
    is_hard: bool
    image_url: Optional[str] = None
    created_at: datetime
    answers: List[AnswerReadSchema]


class QuestionImageSchema(BaseModel):
    image_url: str
