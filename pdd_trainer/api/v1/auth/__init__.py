# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/auth/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Подтверждение email и восстановление пароля.
"""

from .routes import router

__all__ = ["router"]
