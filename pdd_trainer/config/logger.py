# -*- coding: utf-8 -*-
"""
Настройка логирования для ПДД Тренажёра с использованием loguru.
"""
import logging
import sys

from loguru import logger

from pdd_trainer.config.settings import settings

# Удаляем стандартный хендлер loguru
logger.remove()

# Шумные библиотеки, которые не попадают в лог
_SILENCED_PREFIXES = ("httpx", "httpcore", "aiosqlite", "multipart", "passlib")


class InterceptHandler(logging.Handler):
    """Перехватывает стандартные логи и перенаправляет их в loguru."""

    def emit(self, record):
        # Пропускаем uvicorn INFO логи (Uvicorn running, Started server, etc.)
        if record.name.startswith("uvicorn") and record.levelno == logging.INFO:
            return

        if record.name.startswith(_SILENCED_PREFIXES):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# Настраиваем перехват всех стандартных логов
logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

log_level = settings.log_level.upper()

# Формат для консоли (с цветами)
console_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Формат для файла (без цветов)
file_format = (
    "{time:YYYY-MM-DD HH:mm:ss} | "
    "{level: <8} | "
    "{name}:{function}:{line} - "
    "{message}"
)

logger.add(
    sys.stdout,
    format=console_format,
    level=log_level,
    colorize=True,
    backtrace=False,
    diagnose=False,
)

if settings.log_file:
    logger.add(
        settings.log_file,
        level="INFO",
        format=file_format,
        rotation="10 MB",
        retention="14 days",
        encoding="utf-8",
        enqueue=True,
    )


def configure_logger(name: str = "pdd_trainer"):
    """
    Возвращает настроенный логгер.

    Args:
        name: Имя логгера (игнорируется в loguru)

    Returns:
        loguru.Logger: Настроенный логгер
    """
    return logger

