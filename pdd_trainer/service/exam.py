# -*- coding: utf-8 -*-
"""
pdd_trainer/service/exam.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой экзамена: старт, ответы, дополнительные вопросы,
завершение, результаты и статистика пользователя.

Правила экзамена
================
* билет состоит из ``EXAM_BASE_QUESTIONS`` случайных вопросов;
* после ответа на все базовые вопросы при 1 или 2 ошибках выдаются
  дополнительные вопросы (5 или 10), один раз за попытку;
* ``EXAM_MAX_ERRORS`` и более ошибок, как и неотвеченные дополнительные
  вопросы, означают провал;
* ответов в попытке не больше, чем выданных вопросов.

Счётчики попытки всегда пересчитываются по журналу ``user_answers``
под блокировкой строки попытки.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.domain.enums import TestAttemptStatus, TestType
from pdd_trainer.domain.models import TestAttempt, User
from pdd_trainer.repository import attempts as attempt_repo
from pdd_trainer.repository import questions as question_repo
from pdd_trainer.repository.attempts import AnswerTally
from pdd_trainer.service.questions import (build_answers_breakdown,
                                           serialize_questions)
from pdd_trainer.utils.exceptions import (ConflictError, ErrorCode,
                                          NotFoundError)

logger = configure_logger()

EXAM_BASE_QUESTIONS = 20
# Количество ошибок -> количество дополнительных вопросов
EXAM_EXTENSION_QUESTIONS = {1: 5, 2: 10}
EXAM_MAX_ERRORS = 3


def elapsed_seconds(started_at: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.now()
    return max(0, int((now - started_at).total_seconds()))


def score_percent(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(correct / total * 100)


def attempt_summary(attempt: TestAttempt) -> Dict[str, Any]:
    """Краткая сводка попытки для ответов API."""
    return {
        "attempt_id": attempt.id,
        "test_type": attempt.test_type,
        "status": attempt.status,
        "topic_id": attempt.topic_id,
        "total_questions": attempt.total_questions,
        "base_questions_count": attempt.base_questions_count,
        "additional_questions_answered": attempt.additional_questions_answered,
        "correct_answers": attempt.correct_answers,
        "incorrect_answers": attempt.incorrect_answers,
        "score": score_percent(attempt.correct_answers, attempt.total_questions),
        "time_spent_seconds": attempt.time_spent_seconds,
        "started_at": attempt.started_at,
        "completed_at": attempt.completed_at,
    }


def extension_size(attempt: TestAttempt, tally: AnswerTally) -> int:
    """
    Сколько дополнительных вопросов положено попытке прямо сейчас.

    Returns:
        0, если продление не положено или уже было выдано
    """
    if attempt.total_questions != attempt.base_questions_count:
        return 0
    if tally.answered < attempt.base_questions_count:
        return 0
    return EXAM_EXTENSION_QUESTIONS.get(tally.incorrect, 0)


class ExamService:
    """Жизненный цикл экзаменационной попытки."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_attempt(
        self, user: User, attempt_id: int, for_update: bool = False
    ) -> TestAttempt:
        attempt = await attempt_repo.get_user_attempt(
            self.session,
            attempt_id,
            user.id,
            test_type=TestType.EXAM,
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

    async def _apply_tally(self, attempt: TestAttempt) -> AnswerTally:
        tally = await attempt_repo.tally_attempt_answers(self.session, attempt.id)
        attempt.correct_answers = tally.correct
        attempt.incorrect_answers = tally.incorrect
        attempt.additional_questions_answered = max(
            0, tally.answered - attempt.base_questions_count
        )
        attempt.time_spent_seconds = elapsed_seconds(attempt.started_at)
        return tally

    async def _grant_extension(
        self, attempt: TestAttempt, size: int
    ) -> Optional[List[Dict[str, Any]]]:
        answered_ids = await attempt_repo.get_answered_question_ids(
            self.session, attempt.id
        )
        questions = await question_repo.pick_random_questions(
            self.session, size, exclude_ids=answered_ids
        )
        if not questions:
            logger.warning(f"Попытка {attempt.id}: нет вопросов для продления")
            return None
        attempt.total_questions += len(questions)
        await self.session.flush()
        logger.info(
            f"Попытка {attempt.id}: выдано {len(questions)} дополнительных вопросов"
        )
        return serialize_questions(questions, shuffle=True)

    # ---------------------------------------------------------------- операции

    async def start_exam(self, user: User) -> Dict[str, Any]:
        """
        Начать экзамен.

        Returns:
            ID попытки и билет из 20 вопросов без признаков правильности

        Raises:
            ConflictError: В базе меньше 20 вопросов (NOT_ENOUGH_QUESTIONS)
        """
        available = await question_repo.count_questions(self.session)
        if available < EXAM_BASE_QUESTIONS:
            logger.warning(
                f"Недостаточно вопросов для экзамена: {available} из {EXAM_BASE_QUESTIONS}"
            )
            raise ConflictError(
                "Недостаточно вопросов для экзамена",
                error_code=ErrorCode.NOT_ENOUGH_QUESTIONS,
            )

        questions = await question_repo.pick_random_questions(
            self.session, EXAM_BASE_QUESTIONS
        )
        attempt = await attempt_repo.create_attempt(
            self.session, user.id, TestType.EXAM, len(questions)
        )
        await self.session.commit()

        logger.info(f"🚀 Пользователь {user.id} начал экзамен, попытка {attempt.id}")
        return {
            "attempt_id": attempt.id,
            "total_questions": attempt.total_questions,
            "started_at": attempt.started_at,
            "questions": serialize_questions(questions, shuffle=True),
        }

    async def submit_answer(
        self, user: User, attempt_id: int, question_id: int, answer_id: int
    ) -> Dict[str, Any]:
        """
        Принять ответ на вопрос экзамена.

        Raises:
            NotFoundError: Попытка или вариант ответа не найдены
            ConflictError: Попытка уже завершена или вопрос уже отвечен
        """
        attempt = await self._get_attempt(user, attempt_id, for_update=True)
        self._ensure_in_progress(attempt)

        answer = await question_repo.get_answer_for_question(
            self.session, answer_id, question_id
        )
        if answer is None:
            raise NotFoundError("вариант ответа", answer_id)

        answered_ids = await attempt_repo.get_answered_question_ids(
            self.session, attempt.id
        )
        if question_id in answered_ids:
            raise ConflictError("Ответ на этот вопрос уже дан")
        if len(answered_ids) >= attempt.total_questions:
            raise ConflictError("На все вопросы попытки уже даны ответы")

        await attempt_repo.add_user_answer(
            self.session, attempt.id, question_id, answer.id, answer.is_correct
        )
        tally = await self._apply_tally(attempt)

        additional_questions = None
        size = extension_size(attempt, tally)
        if size:
            additional_questions = await self._grant_extension(attempt, size)

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
            "additional_questions": additional_questions,
            "additional_required": additional_questions is not None,
        }

    async def request_additional_questions(
        self, user: User, attempt_id: int
    ) -> Dict[str, Any]:
        """
        Выдать дополнительные вопросы, если попытка на них имеет право.

        Raises:
            ConflictError: Попытка завершена или продление не положено
        """
        attempt = await self._get_attempt(user, attempt_id, for_update=True)
        self._ensure_in_progress(attempt)

        tally = await self._apply_tally(attempt)
        size = extension_size(attempt, tally)
        if not size:
            raise ConflictError("Дополнительные вопросы недоступны для этой попытки")

        questions = await self._grant_extension(attempt, size)
        if questions is None:
            raise ConflictError("Нет вопросов для дополнительного блока")
        await self.session.commit()
        return {
            "attempt_id": attempt.id,
            "total_questions": attempt.total_questions,
            "additional_questions": questions,
        }

    async def finish_exam(self, user: User, attempt_id: int) -> Dict[str, Any]:
        """
        Завершить экзамен и зафиксировать итог.

        Raises:
            ConflictError: Попытка уже завершена (ATTEMPT_COMPLETED)
        """
        attempt = await self._get_attempt(user, attempt_id, for_update=True)
        self._ensure_in_progress(attempt)

        now = datetime.now()
        tally = await self._apply_tally(attempt)
        extension_pending = (
            attempt.total_questions > attempt.base_questions_count
            and tally.answered < attempt.total_questions
        )
        failed = tally.incorrect >= EXAM_MAX_ERRORS or extension_pending
        attempt.status = TestAttemptStatus.FAILED if failed else TestAttemptStatus.PASSED
        attempt.completed_at = now
        attempt.time_spent_seconds = elapsed_seconds(attempt.started_at, now)
        await self.session.commit()

        logger.info(
            f"🏁 Экзамен {attempt.id} завершён: {attempt.status.value} "
            f"({tally.correct}/{attempt.total_questions}, ошибок {tally.incorrect})"
        )
        summary = attempt_summary(attempt)
        summary["answered"] = tally.answered
        summary["passed"] = not failed
        return summary

    async def get_results(self, user: User, attempt_id: int) -> Dict[str, Any]:
        """Итоги попытки с разбором каждого ответа."""
        attempt = await self._get_attempt(user, attempt_id)
        user_answers = await attempt_repo.list_attempt_answers(self.session, attempt.id)

        results = attempt_summary(attempt)
        results["answered"] = len(user_answers)
        results["passed"] = attempt.status == TestAttemptStatus.PASSED
        results["answers"] = await build_answers_breakdown(self.session, user_answers)
        return results

    async def get_user_stats(self, user: User) -> Dict[str, Any]:
        """
        Статистика пользователя по завершённым попыткам.

        Пустые выборки дают нули и ``None`` вместо деления на ноль.
        """
        attempts = await attempt_repo.list_completed_attempts(self.session, user.id)
        exams = [item for item in attempts if item.test_type == TestType.EXAM]

        return {
            "total_attempts": len(attempts),
            "average_score": self._average_score(attempts),
            "average_time": self._average_time(attempts),
            "exam": {
                "attempts": len(exams),
                "passed": sum(1 for item in exams if item.status == TestAttemptStatus.PASSED),
                "failed": sum(1 for item in exams if item.status == TestAttemptStatus.FAILED),
                "average_score": self._average_score(exams),
                "average_time": self._average_time(exams),
                "last_attempt": attempt_summary(exams[0]) if exams else None,
            },
        }

    @staticmethod
    def _average_score(attempts: List[TestAttempt]) -> int:
        correct = sum(item.correct_answers for item in attempts)
        total = sum(item.total_questions for item in attempts)
        return score_percent(correct, total)

    @staticmethod
    def _average_time(attempts: List[TestAttempt]) -> int:
        if not attempts:
            return 0
        return round(sum(item.time_spent_seconds for item in attempts) / len(attempts))
