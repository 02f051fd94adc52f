"""
Review generation request models.

Clients send either camelCase or snake_case keys; every multi-word field
accepts both through AliasChoices.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationError,
    field_validator,
    model_validator,
)


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class ReviewModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class ReviewTitle(ReviewModel):
    title_id: str = Field(..., min_length=1, validation_alias=_alias("title_id", "titleId"))
    title: Optional[str] = None
    year: Optional[int] = None
    genres: List[str] = Field(default_factory=list)
    plot: Optional[str] = None
    runtime_minutes: Optional[int] = Field(
        None, validation_alias=_alias("runtime_minutes", "runtimeMinutes")
    )


class GateState(ReviewModel):
    can_speak: StrictBool = Field(..., validation_alias=_alias("can_speak", "canSpeak"))
    reason: Optional[str] = None
    updated_at: Optional[str] = Field(None, validation_alias=_alias("updated_at", "updatedAt"))


class TasteSnapshot(ReviewModel):
    version: str = Field(..., min_length=1)
    signals: Dict[str, Any] = Field(default_factory=dict)
    summary: Optional[str] = None


class TasteAnchor(ReviewModel):
    anchor_id: str = Field(..., min_length=1, validation_alias=_alias("anchor_id", "anchorId"))
    label: str = Field(..., min_length=1)
    weight: float
    evidence: List[str] = Field(default_factory=list)


class UserRating(ReviewModel):
    title_id: str = Field(..., min_length=1, validation_alias=_alias("title_id", "titleId"))
    rating: float
    rated_at: Optional[str] = Field(None, validation_alias=_alias("rated_at", "ratedAt"))


class Contradictions(ReviewModel):
    unresolved_count: int = Field(
        ..., ge=0, validation_alias=_alias("unresolved_count", "unresolvedCount")
    )
    examples: List[Dict[str, Any]]

    @model_validator(mode="after")
    def count_matches_examples(self) -> "Contradictions":
        if self.unresolved_count != len(self.examples):
            raise ValueError("unresolved_count must match examples length")
        return self


class Drift(ReviewModel):
    trend: Optional[str] = None
    confidence: Optional[float] = None
    signals: List[Dict[str, Any]]


class Interactions(ReviewModel):
    views: int = Field(..., ge=0)
    skips: int = Field(..., ge=0)
    saves: int = Field(..., ge=0)
    likes: int = Field(..., ge=0)
    list_adds: int = Field(..., ge=0, validation_alias=_alias("list_adds", "listAdds"))

    @property
    def total_review_interactions(self) -> int:
        return self.views + self.skips + self.saves + self.likes + self.list_adds


class GenerateReviewRequest(ReviewModel):
    title_id: Optional[str] = Field(None, validation_alias=_alias("title_id", "titleId"))
    title: Optional[ReviewTitle] = None
    spoiler_mode: Literal["spoiler", "non-spoiler"] = Field(
        ..., validation_alias=_alias("spoiler_mode", "spoilerMode")
    )
    provider: Optional[Literal["openai", "deepseek"]] = None
    gate_state: Optional[GateState] = Field(None, validation_alias=_alias("gate_state", "gateState"))
    taste_snapshot: TasteSnapshot = Field(
        ..., validation_alias=_alias("taste_snapshot", "tasteSnapshot")
    )
    taste_anchors: List[TasteAnchor] = Field(
        ..., max_length=50, validation_alias=_alias("taste_anchors", "tasteAnchors")
    )
    user_ratings: List[UserRating] = Field(
        ..., max_length=500, validation_alias=_alias("user_ratings", "userRatings")
    )
    contradictions: Contradictions
    drift: Drift
    interactions: Interactions
    want_to_watch_rationale: Optional[str] = Field(
        None, validation_alias=_alias("want_to_watch_rationale", "wantToWatchRationale")
    )

    @field_validator("spoiler_mode", "provider", mode="before")
    @classmethod
    def lowercase(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def require_title_id(self) -> "GenerateReviewRequest":
        if not self.resolved_title_id:
            raise ValueError("title_id is required (top-level or inside title)")
        return self

    @property
    def resolved_title_id(self) -> str:
        if self.title is not None:
            return self.title.title_id
        return self.title_id or ""


def validation_messages(error: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into 'path: message' strings."""
    messages = []
    for item in error.errors():
        path = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        messages.append(f"{path}: {message}" if path else message)
    return messages
