# -*- coding: utf-8 -*-
"""
pdd_trainer/service/topics.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой тренировок по темам.
"""

import math
from datetime import datetime
from typing import Any, Dict, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.enums import (ProgressStatus, TestAttemptStatus,
                                      TestType)
from pdd_trainer.domain.models import TestAttempt, Topic, User
from pdd_trainer.repository import attempts as attempt_repo
from pdd_trainer.repository import questions as question_repo
from pdd_trainer.repository.progress import (get_or_create_progress,
                                             refresh_progress_counters)
from pdd_trainer.repository.topics import get_topic, list_topics_with_progress
from pdd_trainer.service.exam import elapsed_seconds
from pdd_trainer.service.questions import (build_answers_breakdown,
                                           serialize_questions)
from pdd_trainer.utils.exceptions import (ConflictError, ErrorCode,
                                          NotFoundError)

TOPIC_QUESTIONS_LIMIT = 20
TOPIC_PASS_PERCENT = 70


def required_correct(total_questions: int) -> int:
    """Минимум правильных ответов для зачёта."""
    return math.ceil(total_questions * TOPIC_PASS_PERCENT / 100)


class TopicService:
    """Тренировка по теме и прогресс пользователя."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_topic(self, topic_id: int) -> Topic:
        topic = await get_topic(self.session, topic_id)
        if topic is None:
            raise NotFoundError("тема", topic_id)
        return topic

    async def _get_attempt(
        self, user: User, topic_id: int, attempt_id: int, for_update: bool = False
    ) -> TestAttempt:
        attempt = await attempt_repo.get_user_attempt(
            self.session,
            attempt_id,
            user.id,
            test_type=TestType.TOPIC,
            topic_id=topic_id,
            for_update=for_update,
        )
        if attempt is None:
            raise NotFoundError("попытка", attempt_id)
        return attempt

    @staticmethod
    def _ensure_in_progress(attempt: TestAttempt) -> None:
        if attempt.is_completed:
            raise ConflictError(
                "Попытка уже завершена", error_code=ErrorCode.ATTEMPT_COMPLETED
            )

    # ---------------------------------------------------------------- операции

    async def get_topics_with_progress(self, user: User) -> List[Dict[str, Any]]:
        """Все темы с прогрессом пользователя (по умолчанию ``not_started``)."""
        rows = await list_topics_with_progress(self.session, user.id)
        topics = []
        for topic, progress, last_completed_at in rows:
            topics.append(
                {
                    "id": topic.id,
                    "name": topic.name,
                    "description": topic.description,
                    "questions_count": topic.questions_count,
                    "status": progress.status if progress else ProgressStatus.NOT_STARTED,
                    "questions_total": (
                        progress.questions_total if progress else topic.questions_count
                    ),
                    "questions_answered": progress.questions_answered if progress else 0,
                    "correct_answers": progress.correct_answers if progress else 0,
                    "last_attempt_id": progress.last_attempt_id if progress else None,
                    "last_attempt_at": last_completed_at,
                }
            )
        return topics

    async def start_topic_test(self, user: User, topic_id: int) -> Dict[str, Any]:
        """
        Начать тренировку по теме.

        Вопросы выбираются детерминированно: первые ``TOPIC_QUESTIONS_LIMIT``
        вопросов темы по возрастанию ID.

        Raises:
            NotFoundError: Тема не найдена
            ConflictError: В теме нет вопросов (NO_QUESTIONS)
        """
        topic = await self._get_topic(topic_id)
        questions = await question_repo.list_topic_questions(
            self.session, topic.id, TOPIC_QUESTIONS_LIMIT
        )
        if not questions:
            raise ConflictError("В теме нет вопросов", error_code=ErrorCode.NO_QUESTIONS)

        questions_total = await question_repo.count_questions(self.session, topic.id)
        progress = await get_or_create_progress(
            self.session, user.id, topic.id, questions_total
        )
        progress.questions_total = questions_total
        if progress.status == ProgressStatus.NOT_STARTED:
            progress.status = ProgressStatus.IN_PROGRESS

        attempt = await attempt_repo.create_attempt(
            self.session, user.id, TestType.TOPIC, len(questions), topic_id=topic.id
        )
        await self.session.commit()

        logger.info(
            f"Пользователь {user.id} начал тренировку по теме {topic.id}, попытка {attempt.id}"
        )
        return {
            "attempt_id": attempt.id,
            "topic_id": topic.id,
            "topic_name": topic.name,
            "total_questions": attempt.total_questions,
            "questions": serialize_questions(questions),
        }

    async def get_attempt(
        self, user: User, topic_id: int, attempt_id: int
    ) -> Dict[str, Any]:
        """Состояние попытки: вопросы и количество данных ответов."""
        attempt = await self._get_attempt(user, topic_id, attempt_id)
        topic = await self._get_topic(topic_id)
        questions = await question_repo.list_topic_questions(
            self.session, topic.id, attempt.base_questions_count
        )
        answered_ids = await attempt_repo.get_answered_question_ids(
            self.session, attempt.id
        )
        return {
            "attempt_id": attempt.id,
            "topic_id": topic.id,
            "topic_name": topic.name,
            "status": attempt.status,
            "started_at": attempt.started_at,
            "questions": serialize_questions(questions),
            "answered_question_ids": answered_ids,
            "progress": {
                "answered": len(answered_ids),
                "total": attempt.total_questions,
            },
        }

    async def submit_answer(
        self,
        user: User,
        topic_id: int,
        attempt_id: int,
        question_id: int,
        answer_id: int,
    ) -> Dict[str, Any]:
        """
        Принять ответ и пересчитать попытку и прогресс по журналу ответов.

        Raises:
            NotFoundError: Попытка, вопрос темы или вариант ответа не найдены
            ConflictError: Попытка уже завершена (ATTEMPT_COMPLETED)
        """
        attempt = await self._get_attempt(user, topic_id, attempt_id, for_update=True)
        self._ensure_in_progress(attempt)

        answer = await question_repo.get_answer_for_question(
            self.session, answer_id, question_id
        )
        if answer is None:
            raise NotFoundError("вариант ответа", answer_id)
        if answer.question.topic_id != topic_id:
            raise NotFoundError("вопрос", question_id, details="не относится к теме")

        await attempt_repo.add_user_answer(
            self.session, attempt.id, question_id, answer.id, answer.is_correct
        )
        tally = await attempt_repo.tally_attempt_answers(self.session, attempt.id)
        attempt.correct_answers = tally.correct
        attempt.incorrect_answers = tally.incorrect
        attempt.time_spent_seconds = elapsed_seconds(attempt.started_at)

        progress = await get_or_create_progress(
            self.session, user.id, topic_id, attempt.total_questions
        )
        await refresh_progress_counters(self.session, progress)

        correct_answer_id = None
        if not answer.is_correct:
            correct = await question_repo.get_correct_answer(self.session, question_id)
            correct_answer_id = correct.id if correct else None

        await self.session.commit()
        return {
            "is_correct": answer.is_correct,
            "correct_answer_id": correct_answer_id,
            "correct_answers": tally.correct,
            "incorrect_answers": tally.incorrect,
            "answered": tally.answered,
            "total_questions": attempt.total_questions,
            "progress": {
                "questions_answered": progress.questions_answered,
                "correct_answers": progress.correct_answers,
            },
        }

    async def finish_attempt(
        self, user: User, topic_id: int, attempt_id: int
    ) -> Dict[str, Any]:
        """
        Завершить попытку: зачёт при доле правильных ответов не ниже 70%.

        Неотвеченные вопросы считаются ошибками.

        Raises:
            ConflictError: Попытка уже завершена (ATTEMPT_COMPLETED)
        """
        attempt = await self._get_attempt(user, topic_id, attempt_id, for_update=True)
        self._ensure_in_progress(attempt)

        now = datetime.now()
        tally = await attempt_repo.tally_attempt_answers(self.session, attempt.id)
        passed = tally.correct >= required_correct(attempt.total_questions)

        attempt.status = TestAttemptStatus.PASSED if passed else TestAttemptStatus.FAILED
        attempt.correct_answers = tally.correct
        attempt.incorrect_answers = max(0, attempt.total_questions - tally.correct)
        attempt.completed_at = now
        attempt.time_spent_seconds = elapsed_seconds(attempt.started_at, now)

        progress = await get_or_create_progress(
            self.session, user.id, topic_id, attempt.total_questions
        )
        progress.status = ProgressStatus.PASSED if passed else ProgressStatus.FAILED
        progress.last_attempt_id = attempt.id
        await refresh_progress_counters(self.session, progress)
        await self.session.commit()

        logger.info(
            f"Тренировка {attempt.id} по теме {topic_id} завершена: {attempt.status.value}"
        )
        return {
            "attempt_id": attempt.id,
            "topic_id": topic_id,
            "status": attempt.status,
            "correct_answers": attempt.correct_answers,
            "incorrect_answers": attempt.incorrect_answers,
            "total_questions": attempt.total_questions,
            "required_correct": required_correct(attempt.total_questions),
            "time_spent_seconds": attempt.time_spent_seconds,
            "passed": passed,
        }

    async def get_attempt_results(
        self, user: User, topic_id: int, attempt_id: int
    ) -> Dict[str, Any]:
        """Итоги попытки по теме с разбором ответов."""
        attempt = await self._get_attempt(user, topic_id, attempt_id)
        topic = await self._get_topic(topic_id)
        user_answers = await attempt_repo.list_attempt_answers(self.session, attempt.id)
        return {
            "attempt_id": attempt.id,
            "topic_id": topic.id,
            "topic_name": topic.name,
            "status": attempt.status,
            "correct_answers": attempt.correct_answers,
            "incorrect_answers": attempt.incorrect_answers,
            "total_questions": attempt.total_questions,
            "time_spent_seconds": attempt.time_spent_seconds,
            "passed": attempt.status == TestAttemptStatus.PASSED,
            "results": await build_answers_breakdown(self.session, user_answers),
        }
