"""
Review generation API Schemas - response envelope
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewEnvelope(BaseModel):
    """
    Envelope returned by the review endpoint, success or failure.

    Keys are camelCase on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode")
    errors: List[str] = Field(default_factory=list)
    latency: int = Field(..., description="Handler latency in milliseconds")
    data: Optional[Dict[str, Any]] = Field(
        None,
        description="Decision with camelCase keys (decisionType, confidence, ...)"
    )
    trace_id: str = Field(..., alias="traceId")

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
