# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 14:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Gemini 生成式翻译后端
"""
from loguru import logger

from prompts import (
    PLACEHOLDER_DIRECTIVE,
    POLICY_TRANSLATION_PROMPT_TEMPLATE,
    SINGLE_TRANSLATION_PROMPT_TEMPLATE,
)
from translators.base import HttpTranslationProvider
from translators.decoder import DecodeFailure, decode_structured
from translators.exceptions import StructuredOutputError
from translators.models import (
    BatchTranslation,
    PolicyTranslationOutput,
    SingleTranslationOutput,
    TranslationResult,
)
from triggers.auto_translation.language_catalog import TranslationPolicy, get_language_info

GEMINI_API_URL = "https://generativelanguage.googleapis.com"


class GeminiTranslator(HttpTranslationProvider):
    """
    Gemini generateContent API

    In batch mode one request carries the full translation policy and the
    model answers with the detected language plus every required translation.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model_name: str = "gemini-1.5-flash-latest",
        api_version: str = "v1beta",
        timeout: float = 15.0,
        batch_mode: bool = True,
        base_url: str = GEMINI_API_URL,
        transport=None,
    ):
        super().__init__(
            base_url=base_url,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self.model_name = model_name
        self.api_version = api_version
        self._batch_mode = batch_mode

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def supports_batch(self) -> bool:
        return self._batch_mode

    @property
    def endpoint(self) -> str:
        return f"/{self.api_version}/models/{self.model_name}:generateContent"

    async def _generate(self, prompt: str) -> str | None:
        """Run the prompt and return the raw text, or None on a soft failure."""
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json", "temperature": 0.2},
        }
        data = await self._post_json(self.endpoint, payload)

        if block_reason := (data.get("promptFeedback") or {}).get("blockReason"):
            logger.warning(f"Gemini blocked the prompt - blockReason={block_reason}")
            return None

        candidates = data.get("candidates") or []
        if not candidates:
            logger.warning("Gemini returned no candidates")
            return None

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason != "STOP":
            logger.warning(f"Gemini finished abnormally - finishReason={finish_reason}")
            return None

        parts = (candidate.get("content") or {}).get("parts") or []
        raw_text = "".join(part.get("text", "") for part in parts)
        if not raw_text.strip():
            logger.warning("Gemini returned an empty answer")
            return None

        logger.debug(f"Gemini raw answer: {raw_text[:500]}")

        return raw_text

    async def translate_batch(
        self, text: str, policy: TranslationPolicy, *, preserve_placeholders: bool = False
    ) -> BatchTranslation | None:
        codes = sorted(
            {code for source in policy.sources() for code in [source, *policy.targets_for(source)]}
        )
        prompt = POLICY_TRANSLATION_PROMPT_TEMPLATE.format(
            policy_rules=policy.describe(),
            language_codes=", ".join(codes),
            placeholder_directive=PLACEHOLDER_DIRECTIVE if preserve_placeholders else "",
            text=text,
        )

        raw_text = await self._generate(prompt)
        if raw_text is None:
            return None

        decoded = decode_structured(raw_text, PolicyTranslationOutput)
        if isinstance(decoded, DecodeFailure):
            logger.warning(f"Failed to decode Gemini policy output - {decoded.reason}")
            return None

        return BatchTranslation(source_language=decoded.source_lang, items=decoded.translations)

    async def translate(
        self, text: str, target_lang: str, *, preserve_placeholders: bool = False
    ) -> TranslationResult:
        prompt = SINGLE_TRANSLATION_PROMPT_TEMPLATE.format(
            target_language=get_language_info(target_lang).display_name,
            target_code=target_lang,
            placeholder_directive=PLACEHOLDER_DIRECTIVE if preserve_placeholders else "",
            text=text,
        )

        raw_text = await self._generate(prompt)
        if raw_text is None:
            raise StructuredOutputError("Gemini produced no usable answer")

        decoded = decode_structured(raw_text, SingleTranslationOutput)
        if isinstance(decoded, DecodeFailure):
            raise StructuredOutputError(decoded.reason)

        return TranslationResult(
            translated_text=decoded.text,
            detected_source_language=decoded.source_lang,
            target_language=target_lang,
        )
