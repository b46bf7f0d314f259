# -*- coding: utf-8 -*-
"""
pdd_trainer/api/v1/exam/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Экзамен по билетам.
"""

from .routes import router

__all__ = ["router"]
