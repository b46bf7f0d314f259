# -*- coding: utf-8 -*-
"""
Конфигурация для Uvicorn: логи сервера уходят в loguru.
"""

import logging

from pdd_trainer.config.logger import InterceptHandler


def setup_uvicorn_logging():
    """Настраивает перехват логов uvicorn и SQLAlchemy."""

    for logger_name in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
    ]:
        logger_obj = logging.getLogger(logger_name)
        logger_obj.handlers.clear()
        logger_obj.propagate = False

    logging.getLogger("uvicorn").handlers = [InterceptHandler()]
    logging.getLogger("uvicorn.error").handlers = [InterceptHandler()]
    logging.getLogger("fastapi").handlers = [InterceptHandler()]

    # SQLAlchemy: только предупреждения и ошибки
    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    sqlalchemy_logger.handlers = [InterceptHandler()]
    sqlalchemy_logger.setLevel(logging.WARNING)

    # Access-лог uvicorn дублирует наш middleware
    logging.getLogger("uvicorn.access").disabled = True
