# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/topics/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Тренировки по темам.
"""

from .routes import router

__all__ = ["router"]
