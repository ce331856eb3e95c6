# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 10:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 生成式模型结构化输出的解码
"""
import re
from typing import Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_FENCE_OPEN = re.compile(r"^\s*```[\w-]*\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```\s*$")


class DecodeFailure(BaseModel):
    reason: str
    raw_excerpt: str = ""


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding markdown code fence such as ```json ... ```."""
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text, count=1)
        text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def decode_structured(raw: str | None, schema: Type[T]) -> T | DecodeFailure:
    """Decode model output into ``schema``, never raising."""
    if not raw or not raw.strip():
        return DecodeFailure(reason="empty output")

    text = strip_code_fence(raw)
    try:
        return schema.model_validate_json(text)
    except ValidationError as err:
        logger.warning(f"Structured output does not match {schema.__name__}: {err.error_count()} errors")
        return DecodeFailure(reason=str(err).splitlines()[0], raw_excerpt=text[:200])
