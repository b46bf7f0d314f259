# -*- coding: utf-8 -*-
"""
pdd_trainer/config/settings.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Конфигурация настроек приложения с использованием Pydantic.

Этот модуль загружает конфигурацию из .env файла (если он есть) и переменных
окружения, предоставляя единый объект настроек для всех окружений.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Корень репозитория (рядом лежат alembic/, scripts/, tests/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

ENV_PATH = (BASE_DIR / ".env").resolve()


class Settings(BaseSettings):
    """Настройки приложения, загружаемые из .env файла и окружения."""

    model_config = SettingsConfigDict(
        env_file=ENV_PATH if ENV_PATH.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Окружение: development / production / test
    environment: str = "development"

    # Конфигурация базы данных
    database_url: str | None = None
    postgres_db: str = "pdd_trainer"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    # Создавать таблицы при старте (для dev без alembic)
    auto_create_tables: bool = True

    # Конфигурация JWT
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 120

    # Время жизни одноразовых токенов
    verification_token_ttl_hours: int = 24
    reset_token_ttl_minutes: int = 60

    # Конфигурация администратора (создаётся при старте, если задана)
    admin_email: str | None = None
    admin_password: str | None = None

    # Конфигурация приложения
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    # Публичный адрес API (для ссылок на загруженные файлы)
    base_url: str = "http://localhost:5000"
    # Адрес фронтенда (для ссылок в письмах)
    frontend_url: str = "http://localhost:3000"

    # Конфигурация почты
    mail_backend: str = "console"  # smtp | console
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_timeout: int = 15
    mail_from: str = "Тесты ПДД <noreply@pdd-trainer.local>"

    # Загрузка файлов
    upload_dir: str = str(BASE_DIR / "uploads")
    avatar_max_size: int = 2 * 1024 * 1024  # 2MB
    question_image_max_size: int = 5 * 1024 * 1024  # 5MB
    default_question_image: str | None = None

    # Конфигурация логирования
    log_level: str = "INFO"
    log_file: str | None = None

    # Конфигурация CORS
    cors_allow_origins: str = ""
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    cors_allow_headers: str = "Authorization,Content-Type"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Собираем URL базы данных из компонентов, если он не задан явно
        if not self.database_url:
            self.database_url = self._build_database_url()

    def _build_database_url(self) -> str:
        """Build database URL from individual components."""
        driver = "postgresql+asyncpg"
        return f"{driver}://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def get_allowed_origins(self) -> list[str]:
        """Формирует список разрешённых origins для CORS.
        Приоритет: явные cors_allow_origins -> адрес фронтенда.
        """
        if self.cors_allow_origins:
            return [
                origin.strip()
                for origin in self.cors_allow_origins.split(",")
                if origin.strip()
            ]
        return [self.frontend_url.rstrip("/")]

    def get_cors_methods(self) -> list[str]:
        """Возвращает список разрешённых HTTP методов для CORS."""
        if self.cors_allow_methods == "*":
            return ["*"]
        return [
            method.strip()
            for method in self.cors_allow_methods.split(",")
            if method.strip()
        ]

    def get_cors_headers(self) -> list[str]:
        """Возвращает список разрешённых заголовков для CORS."""
        if self.cors_allow_headers == "*":
            return ["*"]
        return [
            header.strip()
            for header in self.cors_allow_headers.split(",")
            if header.strip()
        ]

    def get_config_source(self) -> str:
        """Возвращает информацию об источнике конфигурации для отладки."""
        if ENV_PATH.exists():
            return f".env: {ENV_PATH}"
        return "environment variables only"


settings = Settings()
