# -*- coding: utf-8 -*-
"""
Message formatting service for translation replies
"""
import html

from models import ContextBlock, DividerBlock, HeaderBlock, ReplyPayload, SectionBlock

# Telegram text limits
MAX_MESSAGE_LENGTH = int(4096 * 0.9)  # 3686 characters (90% of 4096 for safety)

DIVIDER_LINE = "───────────"
TRUNCATION_MARK = "…"


def _truncate(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(TRUNCATION_MARK)] + TRUNCATION_MARK


class MessageFormatter:
    """Service for turning a ReplyPayload into Telegram message text"""

    @staticmethod
    def render_html(payload: ReplyPayload) -> str:
        """HTML rendering used as the primary reply format"""
        lines = []
        for block in payload.blocks:
            if isinstance(block, HeaderBlock):
                lines.append(f"<b>{html.escape(block.text)}</b>")
            elif isinstance(block, DividerBlock):
                lines.append(DIVIDER_LINE)
            elif isinstance(block, SectionBlock):
                title = f"<b>{html.escape(block.language.label)}</b>"
                body = html.escape(block.body)
                if block.failed:
                    body = f"<i>{body}</i>"
                lines.append(f"{title}\n{body}\n")
            elif isinstance(block, ContextBlock):
                lines.append(f"<i>{html.escape(block.text)}</i>")

        rendered = "\n".join(lines).strip()
        if len(rendered) > MAX_MESSAGE_LENGTH:
            # 截断 HTML 容易破坏标签，超长时交给纯文本渲染
            return ""
        return rendered

    @staticmethod
    def render_plain_text(payload: ReplyPayload) -> str:
        """Fallback rendering without markup"""
        lines = [payload.text, ""]
        for section in payload.sections:
            lines.append(section.language.label)
            lines.append(section.body)
            lines.append("")

        context = [block.text for block in payload.blocks if isinstance(block, ContextBlock)]
        lines.extend(context)

        return _truncate("\n".join(lines).strip())
