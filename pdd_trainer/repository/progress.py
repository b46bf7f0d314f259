# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/progress.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Прогресс пользователя по темам.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.enums import ProgressStatus
from pdd_trainer.domain.models import TopicProgress
from pdd_trainer.repository.attempts import tally_topic_answers


async def get_progress(
    session: AsyncSession, user_id: int, topic_id: int
) -> Optional[TopicProgress]:
    stmt = select(TopicProgress).where(
        TopicProgress.user_id == user_id, TopicProgress.topic_id == topic_id
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_or_create_progress(
    session: AsyncSession, user_id: int, topic_id: int, questions_total: int
) -> TopicProgress:
    """
    Получить прогресс пользователя по теме, создав его при первом обращении.

    Args:
        session: Сессия базы данных
        user_id: ID пользователя
        topic_id: ID темы
        questions_total: Количество вопросов темы для новой записи
    """
    progress = await get_progress(session, user_id, topic_id)
    if progress is not None:
        return progress

    progress = TopicProgress(
        user_id=user_id,
        topic_id=topic_id,
        status=ProgressStatus.NOT_STARTED,
        questions_total=questions_total,
        questions_answered=0,
        correct_answers=0,
    )
    session.add(progress)
    await session.flush()
    logger.debug(f"Создан прогресс по теме {topic_id} для пользователя {user_id}")
    return progress


async def refresh_progress_counters(
    session: AsyncSession, progress: TopicProgress
) -> TopicProgress:
    """Пересчитать счётчики прогресса по журналу ответов всех попыток темы."""
    tally = await tally_topic_answers(session, progress.user_id, progress.topic_id)
    progress.questions_answered = tally.answered
    progress.correct_answers = tally.correct
    await session.flush()
    return progress
