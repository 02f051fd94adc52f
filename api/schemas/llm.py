"""
LLM route API Schemas - Response models for the prompt router endpoint
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RawProviderMeta(BaseModel):
    status: int = Field(..., description="Upstream HTTP status")
    headers: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Selected upstream headers (x-request-id)"
    )
    body: Any = Field(None, description="Parsed upstream JSON body")


class RouteResponse(BaseModel):
    """Successful routing result"""

    provider: str = Field(..., description="Provider that answered")
    model: str = Field(..., description="Model used by that provider")
    trace_id: str
    output_text: str = Field(..., description="Normalized model output")
    raw_provider_meta: RawProviderMeta


class ErrorResponse(BaseModel):
    """Stable error envelope; errors[0] is the primary message"""

    errors: List[str]
    trace_id: str
    details: Optional[Any] = None


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    500: {"model": ErrorResponse, "description": "Configuration or internal error"},
    502: {"model": ErrorResponse, "description": "Provider(s) unavailable"},
    504: {"model": ErrorResponse, "description": "Provider timed out"},
}
