# -*- coding: utf-8 -*-
"""
pdd_trainer/service/questions.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой для вопросов: создание, изображения и представление
вопросов в попытках.
"""

import random
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.config.settings import settings
from pdd_trainer.domain.models import Question, UserAnswer
from pdd_trainer.repository import questions as question_repo
from pdd_trainer.repository.topics import get_topic, increment_questions_count
from pdd_trainer.service.files import build_file_url, delete_image, save_image
from pdd_trainer.utils.exceptions import NotFoundError, ValidationError

MIN_ANSWERS = 2


def question_image_url(question: Question) -> Optional[str]:
    url = build_file_url(question.image_url, "question_image")
    return url or settings.default_question_image


def serialize_question(question: Question, shuffle: bool = False) -> Dict[str, Any]:
    """
    Вопрос для прохождения: без признака правильности ответов.

    Args:
        question: Вопрос с загруженными вариантами ответов
        shuffle: Перемешать варианты ответов
    """
    answers = [{"id": answer.id, "text": answer.text} for answer in question.answers]
    if shuffle:
        random.shuffle(answers)
    return {
        "id": question.id,
        "text": question.text,
        "image_url": question_image_url(question),
        "answers": answers,
    }


def serialize_questions(questions: List[Question], shuffle: bool = False) -> List[Dict[str, Any]]:
    items = [serialize_question(question, shuffle=shuffle) for question in questions]
    if shuffle:
        random.shuffle(items)
    return items


async def build_answers_breakdown(
    session: AsyncSession, user_answers: List[UserAnswer]
) -> List[Dict[str, Any]]:
    """Разбор ответов попытки в порядке их отправки."""
    correct_map = await question_repo.get_correct_answers_map(
        session, {item.question_id for item in user_answers}
    )
    breakdown = []
    for item in user_answers:
        correct = correct_map.get(item.question_id)
        breakdown.append(
            {
                "question_id": item.question_id,
                "question_text": item.question.text,
                "image_url": question_image_url(item.question),
                "answer_id": item.answer_id,
                "answer_text": item.answer.text,
                "is_correct": item.is_correct,
                "correct_answer_id": correct.id if correct else None,
                "correct_answer_text": correct.text if correct else None,
            }
        )
    return breakdown


class QuestionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_question(
        self,
        topic_id: int,
        text: str,
        answers: List[Dict[str, Any]],
        is_hard: bool = False,
    ) -> Question:
        """
        Создать вопрос с вариантами ответов.

        Raises:
            NotFoundError: Тема не найдена
            ValidationError: Меньше двух вариантов или правильный вариант не единственный
        """
        topic = await get_topic(self.session, topic_id)
        if topic is None:
            raise NotFoundError("тема", topic_id)

        if not text.strip():
            raise ValidationError("Текст вопроса не может быть пустым")
        if len(answers) < MIN_ANSWERS:
            raise ValidationError(f"Нужно минимум {MIN_ANSWERS} варианта ответа")
        if any(not item["text"].strip() for item in answers):
            raise ValidationError("Текст варианта ответа не может быть пустым")
        correct_count = sum(1 for item in answers if item["is_correct"])
        if correct_count != 1:
            raise ValidationError("Ровно один вариант ответа должен быть правильным")

        question = await question_repo.create_question(
            self.session, topic.id, text.strip(), answers, is_hard=is_hard
        )
        await increment_questions_count(self.session, topic)
        await self.session.commit()

        logger.info(f"Создан вопрос {question.id} в теме {topic.id}")
        return question

    async def upload_image(self, question_id: int, file: UploadFile) -> str:
        """
        Загрузить изображение вопроса, заменив предыдущее.

        Returns:
            Публичный URL изображения
        """
        question = await self.session.get(Question, question_id)
        if question is None:
            raise NotFoundError("вопрос", question_id)

        filename = await save_image(file, "question_image")
        previous = question.image_url
        question.image_url = filename
        await self.session.commit()

        if previous:
            delete_image(previous, "question_image")
        logger.info(f"Изображение вопроса {question.id} обновлено")
        return build_file_url(filename, "question_image")
