# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/8 12:34
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class LanguageInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    emoji: str
    display_name: str

    @property
    def label(self) -> str:
        return f"{self.emoji} {self.display_name}"


class InboundMessage(BaseModel):
    """平台无关的入站消息"""

    message_key: str = Field(description="平台分配的唯一标识，用作幂等键", examples=["-1001:42"])
    message_id: int
    chat_id: int
    topic_id: int | None = Field(default=None, description="论坛话题 ID")
    text: str | None = None
    thread_parent_id: int | None = Field(
        default=None, description="消息本身是某条消息的回复时，指向被回复的消息"
    )
    is_automated: bool = Field(default=False, description="机器人或自动转发的消息")


class TranslationOutcome(BaseModel):
    language: LanguageInfo
    text: str | None = None
    error: str | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


class HeaderBlock(BaseModel):
    type: Literal["header"] = "header"
    text: str


class DividerBlock(BaseModel):
    type: Literal["divider"] = "divider"


class SectionBlock(BaseModel):
    type: Literal["section"] = "section"
    language: LanguageInfo
    body: str
    failed: bool = False


class ContextBlock(BaseModel):
    type: Literal["context"] = "context"
    text: str


ReplyBlock = Annotated[
    Union[HeaderBlock, DividerBlock, SectionBlock, ContextBlock], Field(discriminator="type")
]


class ReplyPayload(BaseModel):
    thread_root_id: int = Field(description="回复挂靠的原始消息 ID")
    source_language: LanguageInfo
    blocks: List[ReplyBlock] = Field(default_factory=list)
    text: str = Field(description="纯文本摘要，用于无法渲染富文本的通知场景")

    @property
    def sections(self) -> List[SectionBlock]:
        return [block for block in self.blocks if isinstance(block, SectionBlock)]
