# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/questions.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Запросы к вопросам и вариантам ответов.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.domain.models import Answer, Question

logger = configure_logger()


async def count_questions(session: AsyncSession, topic_id: int | None = None) -> int:
    stmt = select(func.count(Question.id))
    if topic_id is not None:
        stmt = stmt.where(Question.topic_id == topic_id)
    return int((await session.execute(stmt)).scalar_one())


async def pick_random_questions(
    session: AsyncSession,
    limit: int,
    exclude_ids: Iterable[int] = (),
) -> List[Question]:
    """
    Случайная выборка вопросов со всеми вариантами ответов.

    Args:
        session: Сессия базы данных
        limit: Сколько вопросов выбрать
        exclude_ids: ID вопросов, которые нельзя выбирать

    Returns:
        До ``limit`` различных вопросов в случайном порядке
    """
    stmt = select(Question).options(selectinload(Question.answers))
    exclude_ids = list(exclude_ids)
    if exclude_ids:
        stmt = stmt.where(Question.id.not_in(exclude_ids))
    stmt = stmt.order_by(func.random()).limit(limit)
    result = await session.execute(stmt)
    questions = list(result.scalars().all())
    logger.debug(f"Выбрано {len(questions)} случайных вопросов (лимит {limit})")
    return questions


async def list_topic_questions(
    session: AsyncSession, topic_id: int, limit: int
) -> List[Question]:
    """Первые ``limit`` вопросов темы в порядке ID."""
    stmt = (
        select(Question)
        .options(selectinload(Question.answers))
        .where(Question.topic_id == topic_id)
        .order_by(Question.id)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_answer_for_question(
    session: AsyncSession, answer_id: int, question_id: int
) -> Optional[Answer]:
    """Вариант ответа, только если он принадлежит указанному вопросу."""
    stmt = (
        select(Answer)
        .options(selectinload(Answer.question))
        .where(Answer.id == answer_id, Answer.question_id == question_id)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_correct_answer(session: AsyncSession, question_id: int) -> Optional[Answer]:
    """Правильный вариант вопроса (при нескольких берётся наименьший ID)."""
    stmt = (
        select(Answer)
        .where(Answer.question_id == question_id, Answer.is_correct.is_(True))
        .order_by(Answer.id)
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def create_question(
    session: AsyncSession,
    topic_id: int,
    text: str,
    answers: List[dict],
    is_hard: bool = False,
) -> Question:
    """Создать вопрос вместе с вариантами ответов."""
    question = Question(
        topic_id=topic_id,
        text=text,
        is_hard=is_hard,
        answers=[
            Answer(text=item["text"], is_correct=item["is_correct"]) for item in answers
        ],
    )
    session.add(question)
    await session.flush()
    return question


async def get_correct_answers_map(
    session: AsyncSession, question_ids: Iterable[int]
) -> Dict[int, Answer]:
    """Правильный вариант (с наименьшим ID) для каждого из вопросов."""
    question_ids = list(question_ids)
    if not question_ids:
        return {}
    stmt = (
        select(Answer)
        .where(Answer.question_id.in_(question_ids), Answer.is_correct.is_(True))
        .order_by(Answer.id)
    )
    correct: Dict[int, Answer] = {}
    for answer in (await session.execute(stmt)).scalars().all():
        correct.setdefault(answer.question_id, answer)
    return correct
