# -*- coding: utf-8 -*-
"""
Точка входа приложения ПДД Тренажёр.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdd_trainer.api.v1.auth import router as auth_router
from pdd_trainer.api.v1.exam import router as exam_router
from pdd_trainer.api.v1.questions import router as questions_router
from pdd_trainer.api.v1.topics import router as topics_router
from pdd_trainer.api.v1.users import router as users_router
from pdd_trainer.clients.database_client import check_db_connection, init_db
from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings
from pdd_trainer.config.uvicorn_config import setup_uvicorn_logging
from pdd_trainer.service.files import UPLOADS_URL_PREFIX
from pdd_trainer.utils.admin_check import ensure_admin_exists
from pdd_trainer.utils.exceptions import (APIException, api_exception_handler,
                                          http_exception_handler,
                                          request_validation_exception_handler,
                                          unhandled_exception_handler)
from pdd_trainer.utils.startup_banner import print_startup_banner

logger = configure_logger()

app = FastAPI(
    title="ПДД Тренажёр API",
    description="API тренажёра по правилам дорожного движения: экзамены и тренировки по темам",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    openapi_tags=[
        {
            "name": "👤 Пользователи",
            "description": "Регистрация, вход, профиль и аватар",
        },
        {
            "name": "🔐 Аутентификация",
            "description": "Подтверждение email и восстановление пароля",
        },
        {"name": "📝 Экзамен", "description": "Экзамен по билету из 20 вопросов"},
        {"name": "📚 Темы", "description": "Тренировки по темам и прогресс"},
        {"name": "❓ Вопросы", "description": "Управление вопросами"},
        {"name": "⚙️ Система", "description": "Служебные эндпоинты"},
    ],
)

# Обработчики ошибок: единый JSON-конверт
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Настройка CORS из настроек
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.get_cors_methods(),
    allow_headers=settings.get_cors_headers(),
)


# Middleware для логирования всех запросов
@app.middleware("http")
async def log_all_requests(request, call_next):
    path = request.url.path
    if path.startswith("/api/"):
        logger.info(f"🌐 API запрос: {request.method} {path}")

    response = await call_next(request)

    if path.startswith("/api/"):
        if response.status_code >= 400:
            logger.warning(
                f"❌ API ошибка: {request.method} {path} → {response.status_code}"
            )
        else:
            logger.info(
                f"✅ API ответ: {request.method} {path} → {response.status_code}"
            )
    return response


# Загруженные аватары и изображения вопросов
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(
    UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.upload_dir),
    name="uploads",
)

# Подключаем роутеры с системными emoji тегами
app.include_router(users_router, prefix="/api/users", tags=["👤 Пользователи"])
app.include_router(auth_router, prefix="/api/auth", tags=["🔐 Аутентификация"])
app.include_router(exam_router, prefix="/api/exam", tags=["📝 Экзамен"])
app.include_router(topics_router, prefix="/api/topics", tags=["📚 Темы"])
app.include_router(questions_router, prefix="/api/questions", tags=["❓ Вопросы"])


@app.on_event("startup")
async def startup_event():
    # Настраиваем логи uvicorn
    setup_uvicorn_logging()

    print_startup_banner()

    db_status = "❌"
    admin_status = "❌"

    logger.info("🔧 Инициализация сервисов...")

    try:
        await check_db_connection()
        db_status = "✅"
        logger.info("✅ База данных подключена")
    except SQLAlchemyError as e:
        logger.error(f"❌ Ошибка базы данных: {e}")
        raise

    if settings.auto_create_tables:
        await init_db()

    if await ensure_admin_exists():
        admin_status = "✅"
    else:
        admin_status = "⚠️"

    print("     📊 Статус сервисов:")
    print(f"        База данных: {db_status:<5} Админ: {admin_status:<5}")
    print("    ")
    print("     🎉 Все сервисы готовы к работе!")


@app.on_event("shutdown")
async def shutdown_event():
    """Обработчик завершения приложения"""
    logger.info("🛑 Завершение работы ПДД Тренажёр API")


@app.get("/api", tags=["⚙️ Система"])
async def api_root():
    """Корневой эндпоинт API."""
    return {"message": "ПДД Тренажёр API работает", "version": app.version}


@app.get("/api/health", tags=["⚙️ Система"])
async def api_health():
    """Проверка живости приложения."""
    return {"status": "ok"}
