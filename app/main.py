# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import json

import uvicorn
from loguru import logger
from telegram import Update
from telegram.ext import Application, MessageHandler, filters

from relaybot.handlers.message_handler import DISPATCH_ENGINE_KEY, handle_message
from relaybot.webhook import create_web_app
from settings import settings, LOG_DIR
from translators.factory import create_provider
from triggers.auto_translation import (
    DispatchEngine,
    IdempotencyCache,
    TranslationCache,
    TranslationPolicy,
)
from utils import init_log


def build_dispatch_engine() -> DispatchEngine:
    policy = TranslationPolicy()
    logger.info(f"Translation policy: {policy}")

    return DispatchEngine(
        create_provider(settings),
        policy=policy,
        cache=TranslationCache(
            ttl_seconds=settings.TRANSLATION_CACHE_TTL,
            max_entries=settings.TRANSLATION_CACHE_MAX_ENTRIES,
        ),
        deduplicator=IdempotencyCache(ttl_seconds=settings.DEDUP_WINDOW_SECONDS),
        min_message_length=settings.MIN_MESSAGE_LENGTH,
        probe_language=settings.PROBE_TARGET_LANGUAGE,
        reuse_probe_result=settings.REUSE_PROBE_RESULT,
    )


async def close_provider(application: Application) -> None:
    engine: DispatchEngine | None = application.bot_data.get(DISPATCH_ENGINE_KEY)
    if engine:
        logger.info(f"Dispatch stats: {engine.stats()}")
        await engine.provider.aclose()


def main() -> None:
    """Start the bot."""
    init_log(
        runtime=LOG_DIR.joinpath("runtime.log"),
        error=LOG_DIR.joinpath("error.log"),
        serialize=LOG_DIR.joinpath("serialize.log"),
    )

    sp = settings.model_dump(mode="json")

    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    # 缺少凭据时直接退出，不进入运行状态
    settings.ensure_credentials()

    application = settings.get_default_application(webhook=settings.webhook_mode)
    application.bot_data[DISPATCH_ENGINE_KEY] = build_dispatch_engine()
    application.post_shutdown = close_provider

    # 只处理新消息，编辑、命令与其他事件类型一律忽略
    application.add_handler(
        MessageHandler(
            filters.UpdateType.MESSAGE & (filters.TEXT | filters.CAPTION) & ~filters.COMMAND,
            handle_message,
        )
    )

    if settings.webhook_mode:
        web_app = create_web_app(
            application,
            settings.TELEGRAM_WEBHOOK_SECRET.get_secret_value(),
            webhook_url=settings.TELEGRAM_WEBHOOK_URL,
            port=settings.PORT,
        )
        logger.success(f"Starting webhook server on port {settings.PORT}")
        uvicorn.run(web_app, host="0.0.0.0", port=settings.PORT, log_level="warning")
    else:
        logger.warning("TELEGRAM_WEBHOOK_URL 未配置，使用 polling 模式")
        # Run the bot until the user presses Ctrl-C
        application.run_polling(allowed_updates=[Update.MESSAGE])


if __name__ == "__main__":
    main()
