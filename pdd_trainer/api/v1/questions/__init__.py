# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/questions/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Управление вопросами.
"""

from .routes import router

__all__ = ["router"]
