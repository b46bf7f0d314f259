# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/attempts.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Попытки прохождения и журнал ответов пользователя.

По журналу ``user_answers`` ведутся все подсчёты:
счётчики попытки и прогресса пересчитываются из него, а не инкрементируются.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pdd_trainer.domain.enums import TestAttemptStatus, TestType
from pdd_trainer.domain.models import TestAttempt, UserAnswer


@dataclass(frozen=True)
class AnswerTally:
    """Итоги по журналу ответов."""

    answered: int
    correct: int

    @property
    def incorrect(self) -> int:
        return self.answered - self.correct


async def create_attempt(
    session: AsyncSession,
    user_id: int,
    test_type: TestType,
    questions_count: int,
    topic_id: int | None = None,
) -> TestAttempt:
    attempt = TestAttempt(
        user_id=user_id,
        test_type=test_type,
        status=TestAttemptStatus.IN_PROGRESS,
        topic_id=topic_id,
        total_questions=questions_count,
        base_questions_count=questions_count,
        additional_questions_answered=0,
        correct_answers=0,
        incorrect_answers=0,
        time_spent_seconds=0,
        started_at=datetime.now(),
    )
    session.add(attempt)
    await session.flush()
    return attempt


async def get_user_attempt(
    session: AsyncSession,
    attempt_id: int,
    user_id: int,
    test_type: TestType | None = None,
    topic_id: int | None = None,
    for_update: bool = False,
) -> Optional[TestAttempt]:
    """
    Попытка пользователя по ID.

    Args:
        session: Сессия базы данных
        attempt_id: ID попытки
        user_id: Владелец попытки
        test_type: Ожидаемый тип попытки
        topic_id: Ожидаемая тема (для тренировок по темам)
        for_update: Заблокировать строку (SELECT ... FOR UPDATE) до конца транзакции
    """
    stmt = select(TestAttempt).where(
        TestAttempt.id == attempt_id, TestAttempt.user_id == user_id
    )
    if test_type is not None:
        stmt = stmt.where(TestAttempt.test_type == test_type)
    if topic_id is not None:
        stmt = stmt.where(TestAttempt.topic_id == topic_id)
    if for_update:
        stmt = stmt.with_for_update()
    return (await session.execute(stmt)).scalar_one_or_none()


async def add_user_answer(
    session: AsyncSession,
    attempt_id: int,
    question_id: int,
    answer_id: int,
    is_correct: bool,
) -> UserAnswer:
    user_answer = UserAnswer(
        attempt_id=attempt_id,
        question_id=question_id,
        answer_id=answer_id,
        is_correct=is_correct,
        created_at=datetime.now(),
    )
    session.add(user_answer)
    await session.flush()
    return user_answer


def _tally_columns():
    return (
        func.count(UserAnswer.id),
        func.coalesce(func.sum(case((UserAnswer.is_correct.is_(True), 1), else_=0)), 0),
    )


async def tally_attempt_answers(session: AsyncSession, attempt_id: int) -> AnswerTally:
    """Пересчитать ответы попытки по журналу."""
    stmt = select(*_tally_columns()).where(UserAnswer.attempt_id == attempt_id)
    answered, correct = (await session.execute(stmt)).one()
    return AnswerTally(answered=int(answered), correct=int(correct))


async def tally_topic_answers(
    session: AsyncSession, user_id: int, topic_id: int
) -> AnswerTally:
    """Пересчитать ответы пользователя по всем его попыткам темы."""
    stmt = (
        select(*_tally_columns())
        .join(TestAttempt, TestAttempt.id == UserAnswer.attempt_id)
        .where(
            TestAttempt.user_id == user_id,
            TestAttempt.topic_id == topic_id,
            TestAttempt.test_type == TestType.TOPIC,
        )
    )
    answered, correct = (await session.execute(stmt)).one()
    return AnswerTally(answered=int(answered), correct=int(correct))


async def get_answered_question_ids(session: AsyncSession, attempt_id: int) -> List[int]:
    stmt = select(UserAnswer.question_id).where(UserAnswer.attempt_id == attempt_id)
    return list((await session.execute(stmt)).scalars().unique().all())


async def list_attempt_answers(
    session: AsyncSession, attempt_id: int
) -> List[UserAnswer]:
    """Ответы попытки с вопросами и выбранными вариантами, в порядке отправки."""
    stmt = (
        select(UserAnswer)
        .options(selectinload(UserAnswer.question), selectinload(UserAnswer.answer))
        .where(UserAnswer.attempt_id == attempt_id)
        .order_by(UserAnswer.created_at, UserAnswer.id)
    )
    return list((await session.execute(stmt)).scalars().all())


async def list_completed_attempts(
    session: AsyncSession, user_id: int, test_type: TestType | None = None
) -> List[TestAttempt]:
    """Завершённые попытки пользователя, новые первыми."""
    stmt = select(TestAttempt).where(
        TestAttempt.user_id == user_id,
        TestAttempt.status != TestAttemptStatus.IN_PROGRESS,
    )
    if test_type is not None:
        stmt = stmt.where(TestAttempt.test_type == test_type)
    stmt = stmt.order_by(TestAttempt.completed_at.desc(), TestAttempt.id.desc())
    return list((await session.execute(stmt)).scalars().all())
