# -*- coding: utf-8 -*-
"""HTTP API версии 1."""
