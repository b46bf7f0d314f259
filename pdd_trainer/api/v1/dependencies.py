# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/dependencies.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Фабрики сервисов для внедрения зависимостей FastAPI.

Сервисы создаются на каждый запрос поверх сессии ``get_db``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pdd_trainer.clients.database_client import get_db
from pdd_trainer.service.auth import AuthService
from pdd_trainer.service.email import EmailService, get_email_service
from pdd_trainer.service.exam import ExamService
from pdd_trainer.service.questions import QuestionService
from pdd_trainer.service.topics import TopicService
from pdd_trainer.service.users import UserService


def get_auth_service(
    session: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(session, email_service)


def get_user_service(session: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(session)


def get_exam_service(session: AsyncSession = Depends(get_db)) -> ExamService:
    return ExamService(session)


def get_topic_service(session: AsyncSession = Depends(get_db)) -> TopicService:
    return TopicService(session)


def get_question_service(session: AsyncSession = Depends(get_db)) -> QuestionService:
    return QuestionService(session)
