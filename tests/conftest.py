# -*- coding: utf-8 -*-
"""
Общие фикстуры для тестирования
"""

import os
import tempfile
from dataclasses import dataclass
from typing import List

# Окружение задаётся до импорта приложения: настройки читаются при импорте
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MAIL_BACKEND"] = "console"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pdd-trainer-uploads-")
os.environ["BASE_URL"] = "http://testserver"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,  # noqa: E402
                                    create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from pdd_trainer.clients.database_client import get_db  # noqa: E402
from pdd_trainer.clients.mail_client import MailClient, get_mail_client  # noqa: E402
from pdd_trainer.domain.models import Base  # noqa: E402
from pdd_trainer.main import app  # noqa: E402
from pdd_trainer.service.email import EmailService  # noqa: E402
from pdd_trainer.utils.exceptions import EmailDeliveryError  # noqa: E402

# Тестовая база данных в памяти
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Создать тестовый движок БД (чистая схема на каждый тест)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Создать тестовую сессию БД."""
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        yield session


@dataclass
class OutgoingMail:
    to: str
    subject: str
    html: str


class RecordingMailClient(MailClient):
    """Почтовый клиент, складывающий письма в outbox вместо отправки."""

    def __init__(self):
        super().__init__(backend="console")
        self.outbox: List[OutgoingMail] = []

    async def send(self, to: str, subject: str, html: str) -> None:
        self.outbox.append(OutgoingMail(to=to, subject=subject, html=html))


class FailingMailClient(RecordingMailClient):
    """Почтовый клиент, транспорт которого всегда недоступен."""

    async def send(self, to: str, subject: str, html: str) -> None:
        raise EmailDeliveryError()


@pytest.fixture
def mail_client():
    return RecordingMailClient()


@pytest.fixture
def failing_mail_client():
    return FailingMailClient()


@pytest.fixture
def email_service(mail_client):
    return EmailService(mail_client)


@pytest.fixture
async def async_client(test_session, mail_client):
    """Создать асинхронный тестовый клиент для API."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_client] = lambda: mail_client
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        yield client
    app.dependency_overrides.clear()
