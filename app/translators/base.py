# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 11:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译服务的抽象基类
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import httpx

from translators.exceptions import NetworkOrUnknown, ProviderError, error_from_status

if TYPE_CHECKING:
    from triggers.auto_translation.language_catalog import TranslationPolicy
    from translators.models import BatchTranslation, TranslationResult


class TranslationProvider(ABC):
    """翻译服务的抽象基类

    A provider translates one text into one target language and reports the
    source language it detected along the way. Providers that can answer the
    whole translation policy in one round trip set ``supports_batch``.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    def supports_batch(self) -> bool:
        return False

    @abstractmethod
    async def translate(
        self, text: str, target_lang: str, *, preserve_placeholders: bool = False
    ) -> TranslationResult:
        """
        翻译文本

        Args:
            text: 待翻译文本（emoji 已被占位符替换）
            target_lang: 目标语言代码
            preserve_placeholders: 文本中是否含有需要原样保留的占位符

        Returns:
            TranslationResult

        Raises:
            ProviderError: 请求失败时抛出对应的子类
        """
        ...

    async def translate_batch(
        self, text: str, policy: TranslationPolicy, *, preserve_placeholders: bool = False
    ) -> BatchTranslation | None:
        raise NotImplementedError(f"{self.name} does not support batch translation")

    async def aclose(self) -> None:
        pass


class HttpTranslationProvider(TranslationProvider, ABC):
    """Shared plumbing for providers reached over HTTP with httpx."""

    def __init__(self, *, base_url: str, headers: dict, timeout: float, transport=None):
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def _post_json(self, url: str, payload: dict) -> dict:
        try:
            response = await self._client.post(url, json=payload)
        except httpx.TimeoutException as err:
            raise NetworkOrUnknown(f"{self.name} request timed out: {err}") from err
        except httpx.HTTPError as err:
            raise NetworkOrUnknown(f"{self.name} request failed: {err}") from err

        if response.is_error:
            raise error_from_status(response.status_code, self._error_detail(response))

        try:
            data = response.json()
        except ValueError as err:
            raise NetworkOrUnknown(f"{self.name} returned a non-JSON body") from err

        if not isinstance(data, dict):
            raise NetworkOrUnknown(f"{self.name} returned {type(data).__name__} instead of an object")
        return data

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                return str(error.get("message") or error.get("status") or error)
            if message := body.get("message"):
                return str(message)
        return str(body)[:200]

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["TranslationProvider", "HttpTranslationProvider", "ProviderError"]
