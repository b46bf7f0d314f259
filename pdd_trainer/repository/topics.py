# -*- coding: utf-8 -*-
"""
pdd_trainer/repository/topics.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Темы и сводка прогресса пользователя по темам.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.models import TestAttempt, Topic, TopicProgress


async def get_topic(session: AsyncSession, topic_id: int) -> Optional[Topic]:
    return await session.get(Topic, topic_id)


async def list_topics_with_progress(
    session: AsyncSession, user_id: int
) -> List[Tuple[Topic, Optional[TopicProgress], Optional[datetime]]]:
    """
    Все темы по порядку ID вместе с прогрессом пользователя.

    Returns:
        Список кортежей (тема, прогресс или None, дата завершения последней попытки)
    """
    stmt = (
        select(Topic, TopicProgress, TestAttempt.completed_at)
        .outerjoin(
            TopicProgress,
            and_(
                TopicProgress.topic_id == Topic.id,
                TopicProgress.user_id == user_id,
            ),
        )
        .outerjoin(TestAttempt, TestAttempt.id == TopicProgress.last_attempt_id)
        .order_by(Topic.id)
    )
    result = await session.execute(stmt)
    return [(topic, progress, completed_at) for topic, progress, completed_at in result.all()]


async def increment_questions_count(session: AsyncSession, topic: Topic, step: int = 1) -> Topic:
    topic.questions_count = (topic.questions_count or 0) + step
    await session.flush()
    return topic
