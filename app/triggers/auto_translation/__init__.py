# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能模块
"""

from .cache import TranslationCache, IdempotencyCache
from .language_catalog import TranslationPolicy, get_language_info, normalize
from .node import DispatchEngine

__all__ = [
    "DispatchEngine",
    "TranslationCache",
    "IdempotencyCache",
    "TranslationPolicy",
    "get_language_info",
    "normalize",
]
