# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 语言目录与翻译路由表
"""

from typing import Dict, List

from models import LanguageInfo

PORTUGUESE_PREFIX = "PT"
CANONICAL_PORTUGUESE = "PT-BR"

FALLBACK_EMOJI = "🏳️"

# 语言代码映射表
LANGUAGE_MAPPING: Dict[str, LanguageInfo] = {
    "EN": LanguageInfo(code="EN", emoji="🇺🇸", display_name="English"),
    "ES": LanguageInfo(code="ES", emoji="🇪🇸", display_name="Spanish"),
    "PT-BR": LanguageInfo(code="PT-BR", emoji="🇧🇷", display_name="Portuguese"),
}

DEFAULT_TRANSLATION_POLICY: Dict[str, List[str]] = {
    "PT-BR": ["EN", "ES"],
    "EN": ["PT-BR", "ES"],
    "ES": ["PT-BR", "EN"],
}


def normalize(code: str | None) -> str:
    """Collapse a language code to its canonical upper-case form.

    Every regional Portuguese variant (``pt``, ``pt-BR``, ``PT_PT``) becomes ``PT-BR``.
    """
    if not code:
        return ""

    code = code.strip().replace("_", "-").upper()
    if code.startswith(PORTUGUESE_PREFIX):
        return CANONICAL_PORTUGUESE
    return code


def get_language_info(code: str | None) -> LanguageInfo:
    """获取语言的显示信息，未知语言返回占位信息"""
    code = normalize(code)
    if info := LANGUAGE_MAPPING.get(code):
        return info
    return LanguageInfo(code=code, emoji=FALLBACK_EMOJI, display_name=code)


def format_language_list(lang_codes: List[str]) -> str:
    """格式化语言列表为显示文本"""
    if not lang_codes:
        return ""

    return ", ".join(info.label for info in map(get_language_info, lang_codes))


class TranslationPolicy:
    """Ordered routing table: source language -> target languages."""

    def __init__(self, routes: Dict[str, List[str]] | None = None):
        routes = DEFAULT_TRANSLATION_POLICY if routes is None else routes
        self._routes: Dict[str, List[str]] = {
            normalize(source): [normalize(t) for t in targets] for source, targets in routes.items()
        }

    def sources(self) -> List[str]:
        return list(self._routes)

    def targets_for(self, source: str | None) -> List[str]:
        """获取目标语言列表（排除源语言本身）

        Args:
            source: 检测到的源语言代码

        Returns:
            List[str]: 按配置顺序排列的目标语言代码
        """
        source = normalize(source)
        if not source:
            return []

        target_languages = []
        for lang in self._routes.get(source, []):
            if lang != source and lang not in target_languages:
                target_languages.append(lang)

        return target_languages

    def describe(self) -> str:
        lines = []
        for source, targets in self._routes.items():
            targets = [t for t in targets if t != source]
            if targets:
                lines.append(f"- If the source is {source}, translate to {' and '.join(targets)}.")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TranslationPolicy({self._routes!r})"
