# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : The main message handler orchestrating services.
"""
from loguru import logger
from telegram import Message, Update
from telegram.ext import ContextTypes

from models import InboundMessage
from relaybot.services import response_service
from relaybot.task_manager import non_blocking_handler
from triggers.auto_translation import DispatchEngine

DISPATCH_ENGINE_KEY = "dispatch_engine"


def _thread_parent_id(message: Message) -> int | None:
    """被回复消息的 ID；论坛话题的根消息不算作回复"""
    parent = message.reply_to_message
    if not parent:
        return None

    if message.is_topic_message and (
        parent.forum_topic_created or parent.message_id == message.message_thread_id
    ):
        return None

    return parent.message_id


def _is_automated(message: Message) -> bool:
    if message.from_user and message.from_user.is_bot:
        return True
    if message.via_bot:
        return True
    return bool(message.is_automatic_forward)


def to_inbound_message(message: Message) -> InboundMessage:
    return InboundMessage(
        message_key=f"{message.chat_id}:{message.message_id}",
        message_id=message.message_id,
        chat_id=message.chat_id,
        topic_id=message.message_thread_id if message.is_topic_message else None,
        text=message.text or message.caption,
        thread_parent_id=_thread_parent_id(message),
        is_automated=_is_automated(message),
    )


@non_blocking_handler("handle_message")
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Orchestrates the bot's response to a new message.
    """
    message = update.effective_message
    if not message:
        return

    engine: DispatchEngine = context.application.bot_data[DISPATCH_ENGINE_KEY]
    inbound = to_inbound_message(message)

    payload = await engine.dispatch(inbound)
    if not payload:
        return

    sent = await response_service.send_reply(
        context.bot, inbound.chat_id, payload, topic_id=inbound.topic_id
    )
    if sent:
        logger.success(f"Translation reply posted for {inbound.message_key}")
