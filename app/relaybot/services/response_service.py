# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Service for sending translation replies to Telegram.
"""
from loguru import logger
from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError

from models import ReplyPayload
from relaybot.services.message_formatter import MessageFormatter


async def _send_message(
    bot: Bot,
    chat_id: int,
    text: str,
    reply_to_message_id: int,
    topic_id: int | None = None,
    parse_mode: str | None = None,
) -> None:
    await bot.send_message(
        chat_id=chat_id,
        text=text,
        reply_to_message_id=reply_to_message_id,
        message_thread_id=topic_id,
        parse_mode=parse_mode,
        disable_web_page_preview=True,
    )


async def send_reply(
    bot: Bot, chat_id: int, payload: ReplyPayload, topic_id: int | None = None
) -> bool:
    """发送翻译回复，HTML 渲染失败时优雅降级为纯文本"""
    html_text = MessageFormatter.render_html(payload)

    if html_text:
        try:
            await _send_message(
                bot,
                chat_id,
                html_text,
                payload.thread_root_id,
                topic_id,
                parse_mode=ParseMode.HTML,
            )
            return True
        except BadRequest as err:
            logger.warning(f"Failed to send HTML reply, falling back to plain text: {err}")
        except TelegramError as err:
            logger.error(f"Failed to send reply to {chat_id}:{payload.thread_root_id} - {err}")
            return False

    try:
        await _send_message(
            bot, chat_id, MessageFormatter.render_plain_text(payload), payload.thread_root_id, topic_id
        )
        return True
    except TelegramError as err:
        logger.error(f"Failed to send reply to {chat_id}:{payload.thread_root_id} - {err}")
        return False
