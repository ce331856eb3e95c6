# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 17:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 组装翻译回复
"""
from typing import List

from models import (
    ContextBlock,
    DividerBlock,
    HeaderBlock,
    LanguageInfo,
    ReplyPayload,
    SectionBlock,
    TranslationOutcome,
)
from triggers.auto_translation.language_catalog import format_language_list

REPLY_HEADER = "✨ Translation"
SOURCE_CONTEXT_TEMPLATE = "🔠 Original: {label}"
SUMMARY_TEMPLATE = "Translation available: {languages}"


def build_reply(
    thread_root_id: int, source: LanguageInfo, outcomes: List[TranslationOutcome]
) -> ReplyPayload:
    """Build the reply, one section per outcome in the order given.

    Failed outcomes keep their section and carry the error message instead of a body.
    """
    blocks = [HeaderBlock(text=REPLY_HEADER), DividerBlock()]

    for outcome in outcomes:
        if outcome.ok:
            blocks.append(SectionBlock(language=outcome.language, body=outcome.text))
        else:
            blocks.append(
                SectionBlock(language=outcome.language, body=outcome.error or "", failed=True)
            )

    blocks.append(ContextBlock(text=SOURCE_CONTEXT_TEMPLATE.format(label=source.label)))

    summary = SUMMARY_TEMPLATE.format(
        languages=format_language_list([outcome.language.code for outcome in outcomes])
    )
    return ReplyPayload(
        thread_root_id=thread_root_id, source_language=source, blocks=blocks, text=summary
    )
