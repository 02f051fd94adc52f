"""
Translation API Schemas
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslationProviderMeta(BaseModel):
    """Upstream usage and id, passed through untouched."""
    model: str
    usage: Optional[Any] = None
    id: Optional[Any] = None


class TranslationResponse(BaseModel):
    translation: str = Field(
        ...,
        description="Compact JSON object string with sourceText, translatedText and sourcePronunciation"
    )
    detected_source_lang: str = "auto"
    provider: str
    model: str
    latency_ms: int
    trace_id: str
    raw_provider_meta: TranslationProviderMeta


class TranslationChatResponse(BaseModel):
    """Reply to a translation chat conversation. Serialized with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    trace_id: str = Field(..., alias="traceId")
    ai_provider: str = Field(..., alias="aiProvider")
    latency_ms: int
