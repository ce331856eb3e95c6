from pathlib import Path
from typing import Literal
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
LOG_DIR = PROJECT_DIR.joinpath("logs")


class MissingCredentialsError(RuntimeError):
    """启动时缺少必需的凭据"""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    TELEGRAM_WEBHOOK_SECRET: SecretStr = Field(
        default="",
        description="Webhook 模式下的签名密钥，Telegram 会在 X-Telegram-Bot-Api-Secret-Token 头中回传",
    )

    TELEGRAM_WEBHOOK_URL: str = Field(
        default="",
        description="公网可访问的 webhook 地址，例如 https://bot.example.com/telegram。留空则使用 polling 模式",
    )

    PORT: int = Field(default=10000, description="Web 服务监听端口，同时提供健康检查接口")

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=30.0, description="HTTP 请求超时时间（秒），用于 Telegram API 调用。"
    )

    TRANSLATION_PROVIDER: Literal["deepl", "gemini"] = Field(
        default="gemini", description="翻译后端: `deepl` 或 `gemini`。"
    )

    DEEPL_API_KEY: SecretStr = Field(default="", description="DeepL API Key，以 `:fx` 结尾为免费版")

    DEEPL_API_BASE_URL: str = Field(default="", description="留空时根据 API Key 自动选择免费版或专业版")

    DEEPL_TIMEOUT: float = Field(default=5.0)

    GEMINI_API_KEY: SecretStr = Field(default="", description="Google AI Studio 的 API Key")

    GEMINI_MODEL_NAME: str = Field(default="gemini-1.5-flash-latest")

    GEMINI_API_VERSION: str = Field(default="v1beta")

    GEMINI_TIMEOUT: float = Field(default=15.0, description="生成式模型需要更长的超时时间")

    GEMINI_BATCH_MODE: bool = Field(
        default=True,
        description="单次调用完成语言检测与全部目标语言翻译。关闭后按目标语言逐一请求。",
    )

    MIN_MESSAGE_LENGTH: int = Field(default=5, description="去除提及后少于该长度的消息不翻译")

    PROBE_TARGET_LANGUAGE: str = Field(
        default="EN", description="逐语言模式下，首次（探测）翻译调用的目标语言"
    )

    REUSE_PROBE_RESULT: bool = Field(
        default=True, description="探测调用的目标语言同时是目标语言之一时，直接复用其结果"
    )

    TRANSLATION_CACHE_TTL: float = Field(default=900, description="翻译缓存有效期（秒）")

    TRANSLATION_CACHE_MAX_ENTRIES: int = Field(
        default=1000, description="缓存条目超过该值时整体清空"
    )

    DEDUP_WINDOW_SECONDS: float = Field(
        default=60, description="同一消息 ID 在该时间窗口内只处理一次，需覆盖平台的重投窗口"
    )

    NOTIFY_UNEXPECTED_ERRORS: bool = Field(
        default=False, description="处理消息出现意外异常时，是否在群内回复一条简短提示"
    )

    @field_validator("GEMINI_API_KEY", "DEEPL_API_KEY", mode="before")
    @classmethod
    def _strip_quotes(cls, value):
        if isinstance(value, str):
            return value.strip().strip("\"'")
        return value

    @property
    def webhook_mode(self) -> bool:
        return bool(self.TELEGRAM_WEBHOOK_URL)

    @property
    def provider_api_key(self) -> SecretStr:
        if self.TRANSLATION_PROVIDER == "deepl":
            return self.DEEPL_API_KEY
        return self.GEMINI_API_KEY

    def ensure_credentials(self) -> None:
        """Fail fast when a credential required by the current mode is missing."""
        missing = []
        if not self.TELEGRAM_BOT_API_TOKEN.get_secret_value():
            missing.append("TELEGRAM_BOT_API_TOKEN")
        if self.webhook_mode and not self.TELEGRAM_WEBHOOK_SECRET.get_secret_value():
            missing.append("TELEGRAM_WEBHOOK_SECRET")
        if not self.provider_api_key.get_secret_value():
            missing.append(f"{self.TRANSLATION_PROVIDER.upper()}_API_KEY")

        if missing:
            raise MissingCredentialsError(f"Missing required settings: {', '.join(missing)}")

    def get_default_application(self, *, webhook: bool = False) -> Application:
        builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
        )
        proxy_url = getproxies().get("http")
        if proxy_url:
            logger.success(f"使用代理: {proxy_url}")
            builder = builder.proxy(proxy_url)

        if webhook:
            # 由 FastAPI 接收更新，不需要内置的 Updater
            builder = builder.updater(None)
        elif proxy_url:
            builder = builder.get_updates_proxy(proxy_url)

        return builder.build()


settings = Settings()  # type: ignore
