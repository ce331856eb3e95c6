# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/9 17:38
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 提示词模板
"""

# 一次调用完成语言检测与全部目标语言翻译
POLICY_TRANSLATION_PROMPT_TEMPLATE = """Detect the source language of the text inside <source_text>, then translate it following these rules:
{policy_rules}

Use exactly these language codes: {language_codes}.
Do not translate into the source language itself.
{placeholder_directive}
<source_text>
{text}
</source_text>

Output structure (JSON only):
{{
  "sourceLang": "ISO_CODE",
  "translations": [
    {{ "lang": "ISO_CODE", "text": "content" }}
  ]
}}"""

# 单一目标语言翻译
SINGLE_TRANSLATION_PROMPT_TEMPLATE = """Detect the source language of the text inside <source_text> and translate it into {target_language} ({target_code}).
{placeholder_directive}
<source_text>
{text}
</source_text>

Output structure (JSON only):
{{
  "sourceLang": "ISO_CODE",
  "text": "content"
}}"""

PLACEHOLDER_DIRECTIVE = (
    "Tokens like [[EMOJI_0]] are placeholders: keep every one of them exactly as written, "
    "in the matching position of the translation.\n"
)
