# -*- coding: utf-8 -*-
"""
pdd_trainer/domain/enums.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Определение классов перечислений для домена ПДД Тренажёра.

Этот модуль содержит все перечисления, используемые в приложении: роли,
типы и статусы попыток, статусы прогресса по темам.
"""

import enum


class Role(str, enum.Enum):
    """Роли, доступные в системе."""

    USER = "user"
    ADMIN = "admin"


class TestType(str, enum.Enum):
    """Типы прохождений."""

    EXAM = "exam"  # Полный экзамен по билету из 20 вопросов
    TOPIC = "topic"  # Тренировка по одной теме
    HARD = "hard"  # Сложные вопросы


class TestAttemptStatus(str, enum.Enum):
    """Статусы жизненного цикла попытки."""

    IN_PROGRESS = "in_progress"
    PASSED = "passed"
    FAILED = "failed"


class ProgressStatus(str, enum.Enum):
    """Состояния прогресса пользователя по теме."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PASSED = "passed"
    FAILED = "failed"
