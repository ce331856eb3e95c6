# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/17 09:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Shared fixtures for the translation relay tests
"""
import asyncio
from typing import Dict, List, Optional

import pytest

from models import InboundMessage
from translators.base import TranslationProvider
from translators.models import BatchTranslation, TranslationResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(TranslationProvider):
    """In-memory provider that records every call."""

    def __init__(
        self,
        detected: str = "EN",
        *,
        batch: bool = False,
        batch_result: Optional[BatchTranslation] = None,
        failures: Optional[Dict[str, Exception]] = None,
        delays: Optional[Dict[str, float]] = None,
    ):
        self.detected = detected
        self._batch = batch
        self.batch_result = batch_result
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: List[tuple] = []
        self.batch_calls: List[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    @property
    def supports_batch(self) -> bool:
        return self._batch

    async def translate(self, text, target_lang, *, preserve_placeholders=False):
        self.calls.append((text, target_lang))
        if delay := self.delays.get(target_lang):
            await asyncio.sleep(delay)
        if error := self.failures.get(target_lang):
            raise error
        return TranslationResult(
            translated_text=f"<{target_lang}> {text}",
            detected_source_language=self.detected,
            target_language=target_lang,
        )

    async def translate_batch(self, text, policy, *, preserve_placeholders=False):
        self.batch_calls.append(text)
        if error := self.failures.get("*"):
            raise error
        return self.batch_result

    async def aclose(self) -> None:
        self.closed = True


def make_message(text: str | None, message_id: int = 42, chat_id: int = -1001, **kwargs):
    return InboundMessage(
        message_key=f"{chat_id}:{message_id}",
        message_id=message_id,
        chat_id=chat_id,
        text=text,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()
