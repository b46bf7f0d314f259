# -*- coding: utf-8 -*-
"""ПДД Тренажёр: REST API тренажёра по правилам дорожного движения."""

__version__ = "1.0.0"
