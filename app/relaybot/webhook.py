# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 18:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Webhook 入口与健康检查
"""
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from loguru import logger
from telegram import Update
from telegram.ext import Application

from relaybot.task_manager import wait_for_all_tasks

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"
WEBHOOK_PATH = "/telegram"


def create_web_app(
    application: Application,
    secret_token: str,
    *,
    webhook_url: str = "",
    port: int = 10000,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        await application.initialize()
        await application.start()
        if webhook_url:
            await application.bot.set_webhook(
                url=webhook_url,
                secret_token=secret_token,
                allowed_updates=[Update.MESSAGE],
            )
            logger.success(f"Webhook registered: {webhook_url}")

        yield

        # Shutdown
        logger.info("Application shutdown...")
        await wait_for_all_tasks(timeout=10)
        await application.stop()
        await application.shutdown()
        if application.post_shutdown:
            await application.post_shutdown(application)

    app = FastAPI(title="Translation Relay Bot", lifespan=lifespan)

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return f"🤖 Bot Online | Port: {port}"

    @app.post(WEBHOOK_PATH)
    async def telegram_webhook(request: Request) -> Response:
        received = request.headers.get(SECRET_TOKEN_HEADER, "")
        if not secret_token or not secrets.compare_digest(received, secret_token):
            logger.warning(f"Rejected webhook request from {request.client.host if request.client else '-'}")
            return Response(status_code=403)

        try:
            data = await request.json()
        except ValueError:
            return Response(status_code=400)

        update = Update.de_json(data, application.bot)
        if update is None:
            return Response(status_code=400)

        await application.update_queue.put(update)
        return Response(status_code=200)

    return app
