"""
Review generation - builds the taste-engine prompt, sends it through the LLM
router and validates the decision the model returns.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from llm_gateway.errors import GatewayError, InvalidRequestError, status_for
from llm_gateway.review.output_contract import (
    DecisionType,
    GeneratedOutputDecision,
    MIN_REVIEW_WORDS,
    parse_decision,
)
from llm_gateway.review.schemas import GenerateReviewRequest
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.schemas import Provider, RouteRequest

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error while generating review"

PROMPT_VERSION = "v2-spoiler-mode-long-form"

SPOILER_POLICY = [
    "MODE POLICY: spoiler",
    "Treat spoiler_mode as fundamental context.",
    "You must include explicit spoilers: key plot turns, character reveals, conflicts, and ending outcomes.",
    "Write with enough narrative detail that the user feels like they have already seen the movie/show.",
]

NON_SPOILER_POLICY = [
    "MODE POLICY: non-spoiler",
    "Treat spoiler_mode as fundamental context.",
    "Do not reveal twists, reveals, endings, eliminations, killer identity, or final outcomes.",
    "Keep plot references high-level and safe for first-time viewers.",
]


@dataclass
class ReviewOutcome:
    status_code: int
    errors: List[str] = field(default_factory=list)
    data: Optional[GeneratedOutputDecision] = None
    provider: Optional[Provider] = None


def build_taste_evidence(request: GenerateReviewRequest) -> Dict[str, Any]:
    title = request.title
    gate = request.gate_state
    return {
        "title": {
            "titleId": request.resolved_title_id,
            "title": title.title if title and title.title else "",
            "year": title.year if title else None,
            "genres": title.genres if title else [],
            "plot": title.plot if title and title.plot else "",
            "runtimeMinutes": title.runtime_minutes if title else None,
        },
        "spoilerMode": request.spoiler_mode,
        "gate": {"canSpeak": gate.can_speak, "reason": gate.reason} if gate else None,
        "tasteSnapshot": request.taste_snapshot.model_dump(exclude_none=True),
        "tasteAnchors": [anchor.model_dump() for anchor in request.taste_anchors],
        "userRatings": [rating.model_dump(exclude_none=True) for rating in request.user_ratings],
        "contradictions": request.contradictions.model_dump(),
        "drift": request.drift.model_dump(exclude_none=True),
        "interactions": {
            **request.interactions.model_dump(),
            "totalReviewInteractions": request.interactions.total_review_interactions,
        },
        "wantToWatchRationale": request.want_to_watch_rationale,
    }


def build_prompts(evidence: Dict[str, Any], min_review_words: int = MIN_REVIEW_WORDS) -> Tuple[str, str]:
    """Return (system, input) prompts for one review decision."""
    spoiler = evidence["spoilerMode"] == "spoiler"
    system = "\n".join([
        "You are a film and TV taste engine.",
        "Return JSON only. Do not wrap output in markdown.",
        "Required keys: decision_type, confidence.",
        "decision_type must be one of: " + ", ".join(d.value for d in DecisionType) + ".",
        "Required content by decision_type:",
        "- SPEAK => review_text",
        "- SILENCE => silence_reason",
        "- EXPLAIN_CONFLICT => conflict_explanation",
        "- ASK_LIGHT_QUESTION => light_question",
        f"If decision_type is SPEAK, review_text must be detailed and at least {min_review_words} words.",
        "Optional keys: anchors_used (string[]), mismatches (array), structural_match (boolean).",
        *(SPOILER_POLICY if spoiler else NON_SPOILER_POLICY),
    ])
    text = "\n".join([
        f"PROMPT_VERSION: {PROMPT_VERSION}",
        f"REVIEW_MODE: {evidence['spoilerMode']}",
        "Write a spoiler review that openly discusses plot, story progression, character arcs, and ending-level outcomes."
        if spoiler
        else "Write a non-spoiler review that avoids ending-level details and major reveals.",
        "Generate one review decision from this validated user taste bundle.",
        json.dumps(evidence, ensure_ascii=False),
    ])
    return system, text


class ReviewService:
    def __init__(self, router: ProviderRouter, min_review_words: int = MIN_REVIEW_WORDS):
        self.router = router
        self.min_review_words = min_review_words

    def generate(self, request: GenerateReviewRequest, trace_id: str) -> ReviewOutcome:
        if request.gate_state is not None and not request.gate_state.can_speak:
            logger.info(f"[{trace_id}] review gate closed for {request.resolved_title_id}")
            silence = GeneratedOutputDecision(
                decision_type=DecisionType.SILENCE,
                confidence=0.0,
                silence_reason=request.gate_state.reason or "Review gate disabled",
            )
            return ReviewOutcome(status_code=200, data=silence)

        try:
            provider = self._provider(request.provider)
            system, text = build_prompts(build_taste_evidence(request), self.min_review_words)
            result = self.router.dispatch(
                RouteRequest(
                    input=text,
                    provider=provider,
                    system=system,
                    metadata={
                        "feature": "generateReview",
                        "titleId": request.resolved_title_id,
                        "spoilerMode": request.spoiler_mode,
                        "promptVersion": PROMPT_VERSION,
                        "tasteSnapshotVersion": request.taste_snapshot.version,
                    },
                ),
                trace_id,
            )
            decision = parse_decision(result.output_text, min_review_words=self.min_review_words)
        except GatewayError as e:
            logger.warning(f"[{trace_id}] review generation failed ({e.kind.value}): {e.message}")
            return ReviewOutcome(status_code=status_for(e), errors=[e.message])
        except Exception as e:
            logger.error(f"[{trace_id}] review generation crashed: {e}", exc_info=True)
            return ReviewOutcome(status_code=500, errors=[UNEXPECTED_ERROR_MESSAGE])

        logger.info(
            f"[{trace_id}] review decision {decision.decision_type.value} "
            f"from {result.provider.value} for {request.resolved_title_id}"
        )
        return ReviewOutcome(status_code=200, data=decision, provider=result.provider)

    def _provider(self, name: Optional[str]) -> Optional[Provider]:
        if name is None:
            return None
        provider = Provider(name)
        if provider not in self.router.supported_providers:
            raise InvalidRequestError(f"provider {name} is not configured for reviews")
        return provider
