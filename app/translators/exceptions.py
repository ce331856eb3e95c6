# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 10:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译服务的异常层级

Every error carries a fixed ``user_message`` that is safe to show in chat.
"""


class ProviderError(Exception):
    """翻译服务错误的基类"""

    user_message = "⚠️ Translation failed."

    def __init__(self, detail: str = "", *, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail or self.user_message)


class InvalidRequest(ProviderError):
    user_message = "⚠️ The translation request was rejected."


class AuthenticationFailed(ProviderError):
    user_message = "🔑 Translation service authentication failed."


class RateLimited(ProviderError):
    user_message = "⏳ Too many translation requests, please try again shortly."


class QuotaExceeded(ProviderError):
    user_message = "📉 The translation quota has been exhausted."


class ServiceUnavailable(ProviderError):
    user_message = "🛠️ The translation service is temporarily unavailable."


class NetworkOrUnknown(ProviderError):
    user_message = "🌐 Could not reach the translation service."


class StructuredOutputError(ProviderError):
    """生成式模型返回了无法解析的结构化输出"""

    user_message = "🤖 The translation model returned an unreadable answer."


def error_from_status(status_code: int, detail: str = "") -> ProviderError:
    """Map an HTTP status of a translation backend onto the error taxonomy."""
    if status_code in (400, 404, 413):
        error_cls = InvalidRequest
    elif status_code in (401, 403):
        error_cls = AuthenticationFailed
    elif status_code == 429:
        error_cls = QuotaExceeded if "quota" in detail.lower() else RateLimited
    elif status_code == 456:
        error_cls = QuotaExceeded
    elif status_code >= 500:
        error_cls = ServiceUnavailable
    else:
        error_cls = NetworkOrUnknown

    return error_cls(detail, status_code=status_code)
