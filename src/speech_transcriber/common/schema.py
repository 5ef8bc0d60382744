"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConfigOut(_CamelModel):
    azure_subscription_key: str = Field("", alias="azureSubscriptionKey")
    azure_service_region: str = Field(alias="azureServiceRegion")
    azure_custom_endpoint_id: str = Field("", alias="azureCustomEndpointId")
    qwen_api_key: str = Field("", alias="qwenApiKey")
    qwen_api_url: str = Field(alias="qwenApiUrl")


class TokenOut(BaseModel):
    token: str
    region: str


class RewriteIn(_CamelModel):
    text: str | None = ""
    relevant_phrases: str | None = Field("", alias="relevantPhrases")


class RewriteOut(_CamelModel):
    rewritten_text: str = Field(alias="rewrittenText")
    original_length: int | None = Field(None, alias="originalLength")
    rewritten_length: int | None = Field(None, alias="rewrittenLength")


@dataclass
class RecognitionEvent:
    """One recognizer result; interim results have is_final=False."""
    text: str
    is_final: bool
