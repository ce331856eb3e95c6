# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/16 10:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TranslationResult(BaseModel):
    translated_text: str
    detected_source_language: str = Field(default="", description="服务端检测到的源语言")
    target_language: str = ""


class BatchItem(BaseModel):
    lang: str
    text: str


class BatchTranslation(BaseModel):
    """一次调用返回的全部目标语言译文"""

    source_language: str
    items: List[BatchItem] = Field(default_factory=list)


class PolicyTranslationOutput(BaseModel):
    """Structured answer of the generative model for the whole translation policy."""

    model_config = ConfigDict(populate_by_name=True)

    source_lang: str = Field(alias="sourceLang", min_length=1)
    translations: List[BatchItem]


class SingleTranslationOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_lang: str = Field(alias="sourceLang", min_length=1)
    text: str


class DeepLTranslation(BaseModel):
    detected_source_language: str = ""
    text: str


class DeepLResponse(BaseModel):
    translations: List[DeepLTranslation] = Field(min_length=1)
