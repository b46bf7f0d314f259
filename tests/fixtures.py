# -*- coding: utf-8 -*-
"""
Фикстуры для тестирования: пользователи, темы, вопросы
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.domain.enums import Role
from pdd_trainer.domain.models import (EmailVerificationToken,
                                       PasswordResetToken, Question, Topic,
                                       User)
from pdd_trainer.repository.base import create_item
from pdd_trainer.repository.questions import create_question
from pdd_trainer.security.security import create_user_token, hash_password

DEFAULT_PASSWORD = "secret1"


async def create_test_user(
    session: AsyncSession,
    email: str = "user@example.com",
    password: str = DEFAULT_PASSWORD,
    role: Role = Role.USER,
    is_verified: bool = True,
    is_blocked: bool = False,
) -> User:
    """Создать тестового пользователя"""
    user = await create_item(
        session,
        User,
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_verified=is_verified,
        is_blocked=is_blocked,
    )
    await session.commit()
    return user


async def create_test_admin(session: AsyncSession, email: str = "admin@example.com") -> User:
    return await create_test_user(session, email=email, role=Role.ADMIN)


def auth_headers(user: User) -> Dict[str, str]:
    """Заголовок авторизации с JWT пользователя"""
    return {"Authorization": f"Bearer {create_user_token(user)}"}


async def create_test_topic(
    session: AsyncSession, name: str = "Дорожные знаки", description: Optional[str] = None
) -> Topic:
    """Создать тестовую тему"""
    topic = await create_item(
        session,
        Topic,
        name=name,
        description=description or f"Вопросы по теме «{name}»",
        questions_count=0,
    )
    await session.commit()
    return topic


async def create_test_questions(
    session: AsyncSession, topic: Topic, count: int = 3, answers_count: int = 3
) -> List[Question]:
    """
    Создать тестовые вопросы темы.

    Первый вариант ответа каждого вопроса правильный.
    """
    questions = []
    start = topic.questions_count
    for i in range(start, start + count):
        answers = [
            {"text": f"Вариант {j + 1} вопроса {i + 1}", "is_correct": j == 0}
            for j in range(answers_count)
        ]
        question = await create_question(
            session, topic.id, f"Вопрос {i + 1} темы {topic.name}", answers
        )
        questions.append(question)
    topic.questions_count = start + count
    await session.commit()
    return questions


def build_answer_key(questions: List[Question]) -> Dict[int, Tuple[int, int]]:
    """Карта question_id -> (ID правильного ответа, ID неправильного ответа)"""
    key = {}
    for question in questions:
        correct = next(answer for answer in question.answers if answer.is_correct)
        wrong = next(answer for answer in question.answers if not answer.is_correct)
        key[question.id] = (correct.id, wrong.id)
    return key


async def create_test_verification_token(
    session: AsyncSession,
    user: User,
    token: str = "a" * 64,
    expires_in: timedelta = timedelta(hours=24),
) -> EmailVerificationToken:
    record = await create_item(
        session,
        EmailVerificationToken,
        token=token,
        user_id=user.id,
        expires_at=datetime.now() + expires_in,
    )
    await session.commit()
    return record


async def create_test_reset_token(
    session: AsyncSession,
    user: User,
    token: str = "b" * 64,
    expires_in: timedelta = timedelta(hours=1),
    is_used: bool = False,
) -> PasswordResetToken:
    record = await create_item(
        session,
        PasswordResetToken,
        token=token,
        user_id=user.id,
        expires_at=datetime.now() + expires_in,
        is_used=is_used,
    )
    await session.commit()
    return record
