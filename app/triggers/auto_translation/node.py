# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能的核心业务逻辑
"""
import asyncio
import re
from typing import Dict, List, Optional

from loguru import logger

from models import InboundMessage, ReplyPayload, TranslationOutcome
from translators.base import TranslationProvider
from translators.exceptions import ProviderError, StructuredOutputError
from triggers.auto_translation.cache import IdempotencyCache, TranslationCache
from triggers.auto_translation.emoji_shield import ShieldedText, shield, unshield
from triggers.auto_translation.language_catalog import (
    TranslationPolicy,
    get_language_info,
    normalize,
)
from triggers.auto_translation.renderer import build_reply
from utils import preview

# @username 提及与频道引用
MENTION_PATTERN = re.compile(r"(?<!\S)@\w+")

GENERIC_FAILURE_MESSAGE = "⚠️ Translation failed."


class Detection:
    """Outcome of the single detection-carrying call."""

    def __init__(self, source_language: str, prefilled: Dict[str, str], batch: bool = False):
        self.source_language = normalize(source_language)
        self.prefilled = prefilled
        self.batch = batch


class DispatchEngine:
    """
    Turns an inbound message into a translation reply.

    Filter -> detect (one provider call) -> resolve targets -> concurrent fan-out -> render.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        *,
        policy: Optional[TranslationPolicy] = None,
        cache: Optional[TranslationCache] = None,
        deduplicator: Optional[IdempotencyCache] = None,
        min_message_length: int = 5,
        probe_language: str = "EN",
        reuse_probe_result: bool = True,
    ):
        self.provider = provider
        self.policy = policy if policy is not None else TranslationPolicy()
        self.cache = cache if cache is not None else TranslationCache()
        self.deduplicator = deduplicator if deduplicator is not None else IdempotencyCache()
        self.min_message_length = min_message_length
        self.probe_language = normalize(probe_language)
        self.reuse_probe_result = reuse_probe_result

        self._stats = {
            "dispatched": 0,
            "skipped": 0,
            "duplicates": 0,
            "detection_failures": 0,
            "no_targets": 0,
            "replies": 0,
        }

    @staticmethod
    def clean_text(text: str | None) -> str:
        """移除提及标记"""
        if not text:
            return ""
        text = MENTION_PATTERN.sub("", text)
        text = re.sub(r"[ \t]{2,}", " ", text)
        return text.strip()

    def accepts(self, message: InboundMessage) -> bool:
        if message.thread_parent_id is not None:
            logger.debug(f"[自动翻译] 跳过：线程内回复 - {message.message_key}")
            return False

        if not message.text:
            logger.debug(f"[自动翻译] 跳过：没有文本内容 - {message.message_key}")
            return False

        if message.is_automated:
            logger.debug(f"[自动翻译] 跳过：机器人消息 - {message.message_key}")
            return False

        if len(self.clean_text(message.text)) < self.min_message_length:
            logger.debug(f"[自动翻译] 跳过：文本过短 - {message.message_key}")
            return False

        return True

    async def dispatch(self, message: InboundMessage) -> ReplyPayload | None:
        """Returns the reply to post, or None when nothing should be sent."""
        if not self.accepts(message):
            self._stats["skipped"] += 1
            return None

        if not self.deduplicator.check_and_mark(message.message_key):
            logger.info(f"Ignoring redelivered message {message.message_key}")
            self._stats["duplicates"] += 1
            return None

        self._stats["dispatched"] += 1
        text = self.clean_text(message.text)
        shielded = shield(text)
        logger.info(f"[自动翻译] 开始处理消息: {preview(text)}")

        if self.provider.supports_batch:
            detection = await self._detect_with_batch(shielded)
        else:
            detection = await self._detect_with_probe(shielded)

        if detection is None:
            self._stats["detection_failures"] += 1
            return None

        target_langs = self.policy.targets_for(detection.source_language)
        if not target_langs:
            logger.info(
                f"没有找到目标语言，跳过翻译。检测语言：{detection.source_language or 'unknown'}"
            )
            self._stats["no_targets"] += 1
            return None

        outcomes: List[TranslationOutcome] = await asyncio.gather(
            *(self._translate_target(text, shielded, lang, detection) for lang in target_langs)
        )

        failed = [o.language.code for o in outcomes if not o.ok]
        logger.info(
            f"已为 {message.message_key} 执行自动翻译 - "
            f"source={detection.source_language} targets={target_langs} failed={failed}"
        )

        self._stats["replies"] += 1
        return build_reply(
            thread_root_id=message.message_id,
            source=get_language_info(detection.source_language),
            outcomes=list(outcomes),
        )

    async def _detect_with_probe(self, shielded: ShieldedText) -> Detection | None:
        try:
            result = await self.provider.translate(
                shielded.text,
                self.probe_language,
                preserve_placeholders=shielded.has_placeholders,
            )
        except ProviderError as err:
            logger.warning(f"语言检测失败，跳过自动翻译 - {type(err).__name__}: {err}")
            return None

        if not result.detected_source_language:
            logger.warning(f"{self.provider.name} did not report a source language")
            return None

        prefilled = {}
        if self.reuse_probe_result:
            prefilled[self.probe_language] = unshield(result.translated_text, shielded.placeholders)

        return Detection(result.detected_source_language, prefilled)

    async def _detect_with_batch(self, shielded: ShieldedText) -> Detection | None:
        try:
            batch = await self.provider.translate_batch(
                shielded.text, self.policy, preserve_placeholders=shielded.has_placeholders
            )
        except ProviderError as err:
            logger.warning(f"语言检测失败，跳过自动翻译 - {type(err).__name__}: {err}")
            return None

        if batch is None:
            logger.warning(f"{self.provider.name} returned no usable translation, skipping reply")
            return None

        prefilled = {
            normalize(item.lang): unshield(item.text, shielded.placeholders) for item in batch.items
        }
        return Detection(batch.source_language, prefilled, batch=True)

    async def _translate_target(
        self, text: str, shielded: ShieldedText, lang: str, detection: Detection
    ) -> TranslationOutcome:
        language = get_language_info(lang)

        if (prefilled := detection.prefilled.get(lang)) is not None:
            return TranslationOutcome(language=language, text=prefilled)

        if detection.batch:
            logger.warning(f"{self.provider.name} answer is missing {lang}")
            return TranslationOutcome(language=language, error=StructuredOutputError.user_message)

        if (cached := self.cache.get(text, lang)) is not None:
            return TranslationOutcome(language=language, text=cached, from_cache=True)

        try:
            result = await self.provider.translate(
                shielded.text, lang, preserve_placeholders=shielded.has_placeholders
            )
        except ProviderError as err:
            logger.error(f"翻译到 {lang} 失败 - {type(err).__name__}: {err}")
            return TranslationOutcome(language=language, error=err.user_message)
        except Exception as err:
            logger.exception(f"Unexpected error while translating into {lang}: {err}")
            return TranslationOutcome(language=language, error=GENERIC_FAILURE_MESSAGE)

        translated = unshield(result.translated_text, shielded.placeholders)
        self.cache.put(text, lang, translated)
        return TranslationOutcome(language=language, text=translated)

    def stats(self) -> dict:
        return {**self._stats, "cache": self.cache.stats()}
