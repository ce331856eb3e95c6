# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 11:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : DeepL 直译后端
"""
from loguru import logger
from pydantic import ValidationError

from translators.base import HttpTranslationProvider
from translators.exceptions import NetworkOrUnknown
from translators.models import DeepLResponse, TranslationResult

DEEPL_FREE_API_URL = "https://api-free.deepl.com"
DEEPL_PRO_API_URL = "https://api.deepl.com"

# DeepL 已弃用无地区的 EN 目标语言
_WIRE_TARGET_CODES = {"EN": "EN-US", "PT": "PT-BR"}


class DeepLTranslator(HttpTranslationProvider):
    """
    DeepL translation API

    The response carries ``detected_source_language`` next to the translation,
    which is reused as the source-language signal.
    """

    def __init__(self, api_key: str, *, base_url: str = "", timeout: float = 5.0, transport=None):
        if not base_url:
            base_url = DEEPL_FREE_API_URL if api_key.endswith(":fx") else DEEPL_PRO_API_URL
        super().__init__(
            base_url=base_url,
            headers={"Authorization": f"DeepL-Auth-Key {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "deepl"

    @staticmethod
    def to_wire_code(lang: str) -> str:
        lang = lang.upper()
        return _WIRE_TARGET_CODES.get(lang, lang)

    async def translate(
        self, text: str, target_lang: str, *, preserve_placeholders: bool = False
    ) -> TranslationResult:
        payload = {"text": [text], "target_lang": self.to_wire_code(target_lang)}
        if preserve_placeholders:
            payload["preserve_formatting"] = True

        data = await self._post_json("/v2/translate", payload)

        try:
            translation = DeepLResponse.model_validate(data).translations[0]
        except ValidationError as err:
            raise NetworkOrUnknown(f"Unexpected DeepL response: {err.error_count()} errors") from err

        logger.debug(
            f"DeepL translated into {target_lang} (detected={translation.detected_source_language})"
        )
        return TranslationResult(
            translated_text=translation.text,
            detected_source_language=translation.detected_source_language,
            target_language=target_lang,
        )
