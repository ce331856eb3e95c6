# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/15 21:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译前剥离 emoji，翻译后还原
"""
import re
from typing import List

from loguru import logger
from pydantic import BaseModel, Field

PLACEHOLDER_TEMPLATE = "[[EMOJI_{index}]]"

_PICTOGRAPHIC = (
    r"[\u203C\u2049\u2139\u2194-\u2199\u21A9\u21AA\u231A\u231B\u2328\u23CF\u23E9-\u23F3"
    r"\u23F8-\u23FA\u24C2\u25AA\u25AB\u25B6\u25C0\u25FB-\u25FE\u2600-\u27BF\u2934\u2935"
    r"\u2B05-\u2B07\u2B1B\u2B1C\u2B50\u2B55\u3030\u303D\u3297\u3299\U0001F000-\U0001FAFF]"
)
# variation selector, skin tones, tag characters (subdivision flags)
_MODIFIERS = r"(?:\uFE0F|[\U0001F3FB-\U0001F3FF]|[\U000E0020-\U000E007F])*"
_ELEMENT = _PICTOGRAPHIC + _MODIFIERS

EMOJI_PATTERN = re.compile(
    r"[\U0001F1E6-\U0001F1FF]{2}"
    r"|[0-9#*]\uFE0F?\u20E3"
    rf"|{_ELEMENT}(?:\u200D{_ELEMENT})*"
)


class ShieldedText(BaseModel):
    text: str
    placeholders: List[str] = Field(default_factory=list, description="按出现顺序记录的原始 emoji")

    @property
    def has_placeholders(self) -> bool:
        return bool(self.placeholders)


def placeholder(index: int) -> str:
    return PLACEHOLDER_TEMPLATE.format(index=index)


def shield(text: str) -> ShieldedText:
    """Replace every emoji cluster with an index-tagged placeholder."""
    placeholders: List[str] = []

    def _swap(match: re.Match) -> str:
        placeholders.append(match.group(0))
        return placeholder(len(placeholders) - 1)

    shielded = EMOJI_PATTERN.sub(_swap, text)
    if not placeholders:
        return ShieldedText(text=text)

    return ShieldedText(text=shielded, placeholders=placeholders)


def _fallback_patterns(index: int) -> List[re.Pattern]:
    return [
        # [[ emoji_3 ]] / [[Emoji 3]]
        re.compile(rf"\[\s*\[\s*emoji[\s_-]*{index}\s*\]\s*\]", re.IGNORECASE),
        # EMOJI_3 / [EMOJI 3]
        re.compile(rf"(?:\[{{1,2}}\s*)?\bemoji[\s_-]*{index}(?!\d)(?:\s*\]{{1,2}})?", re.IGNORECASE),
    ]


def unshield(text: str, placeholders: List[str]) -> str:
    """Put the original glyphs back, tolerating placeholders the translator has bent."""
    if not placeholders or not text:
        return text

    for index, glyph in enumerate(placeholders):
        token = placeholder(index)
        if token in text:
            text = text.replace(token, glyph)
            continue

        for pattern in _fallback_patterns(index):
            text, replaced = pattern.subn(lambda _: glyph, text)
            if replaced:
                break
        else:
            logger.debug(f"Placeholder {token} not found in translated text, left as is")

    return text
