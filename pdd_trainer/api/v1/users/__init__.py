# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/users/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Регистрация, вход и профиль пользователя.
"""

from .routes import router

__all__ = ["router"]
