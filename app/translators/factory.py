# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 15:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 根据配置创建翻译后端
"""
from loguru import logger

from settings import Settings
from translators.base import TranslationProvider
from translators.deepl_translator import DeepLTranslator
from translators.gemini_translator import GeminiTranslator


def create_provider(settings: Settings) -> TranslationProvider:
    backend = settings.TRANSLATION_PROVIDER

    if backend == "deepl":
        provider = DeepLTranslator(
            api_key=settings.DEEPL_API_KEY.get_secret_value(),
            base_url=settings.DEEPL_API_BASE_URL,
            timeout=settings.DEEPL_TIMEOUT,
        )
    elif backend == "gemini":
        provider = GeminiTranslator(
            api_key=settings.GEMINI_API_KEY.get_secret_value(),
            model_name=settings.GEMINI_MODEL_NAME,
            api_version=settings.GEMINI_API_VERSION,
            timeout=settings.GEMINI_TIMEOUT,
            batch_mode=settings.GEMINI_BATCH_MODE,
        )
    else:
        raise ValueError(f"Unknown translation provider: {backend}")

    logger.success(f"Translation provider ready: {provider.name} (batch={provider.supports_batch})")
    return provider
