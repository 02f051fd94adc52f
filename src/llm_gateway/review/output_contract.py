"""
Output contract for review decisions.

Model output is free text that is supposed to be a JSON object. Handling is
split in two steps:

1. extract_json_object - tolerant: strips a code fence and, if needed, slices
   the outermost {...} out of surrounding prose.
2. validate_decision - strict: enum, numeric confidence, and the one text
   field the decision type requires.

Both steps raise InvalidOutputError.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from llm_gateway.errors import InvalidOutputError
from llm_gateway.utils.text_cleaning import (
    as_finite_number,
    as_optional_string,
    as_string_list,
    strip_code_fence,
    word_count,
)

MIN_REVIEW_WORDS = 500


class DecisionType(str, Enum):
    SPEAK = "SPEAK"
    SILENCE = "SILENCE"
    EXPLAIN_CONFLICT = "EXPLAIN_CONFLICT"
    ASK_LIGHT_QUESTION = "ASK_LIGHT_QUESTION"


# decision type -> (result attribute, accepted keys in priority order)
REQUIRED_TEXT_FIELDS: Dict[DecisionType, Tuple[str, Tuple[str, ...]]] = {
    DecisionType.SPEAK: ("review_text", ("review_text", "reviewText")),
    DecisionType.SILENCE: ("silence_reason", ("silence_reason", "silenceReason", "reason")),
    DecisionType.EXPLAIN_CONFLICT: (
        "conflict_explanation", ("conflict_explanation", "conflictExplanation")
    ),
    DecisionType.ASK_LIGHT_QUESTION: ("light_question", ("light_question", "lightQuestion")),
}


@dataclass
class GeneratedOutputDecision:
    decision_type: DecisionType
    confidence: float
    review_text: Optional[str] = None
    silence_reason: Optional[str] = None
    conflict_explanation: Optional[str] = None
    light_question: Optional[str] = None
    anchors_used: Optional[List[str]] = None
    mismatches: Optional[List[Any]] = None
    structural_match: Optional[bool] = None

    def as_dict(self) -> Dict[str, Any]:
        """camelCase view with absent fields omitted."""
        out: Dict[str, Any] = {
            "decisionType": self.decision_type.value,
            "confidence": self.confidence,
        }
        optional = {
            "reviewText": self.review_text,
            "silenceReason": self.silence_reason,
            "conflictExplanation": self.conflict_explanation,
            "lightQuestion": self.light_question,
            "anchorsUsed": self.anchors_used,
            "mismatches": self.mismatches,
            "structuralMatch": self.structural_match,
        }
        out.update({key: value for key, value in optional.items() if value is not None})
        return out


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(output_text: str) -> Dict[str, Any]:
    if not isinstance(output_text, str) or not output_text.strip():
        raise InvalidOutputError("Model output is empty")

    candidate = strip_code_fence(output_text)
    parsed = _loads_object(candidate)
    if parsed is not None:
        return parsed

    first, last = candidate.find("{"), candidate.rfind("}")
    if first >= 0 and last > first:
        parsed = _loads_object(candidate[first:last + 1])
        if parsed is not None:
            return parsed

    raise InvalidOutputError("Invalid model output JSON")


def _first_string(root: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = as_optional_string(root.get(key))
        if value:
            return value
    return None


def validate_decision(root: Dict[str, Any], min_review_words: int = MIN_REVIEW_WORDS) -> GeneratedOutputDecision:
    raw_type = _first_string(root, ("decision_type", "decisionType"))
    try:
        decision_type = DecisionType(raw_type)
    except ValueError:
        raise InvalidOutputError("Invalid decision_type in model output")

    confidence = as_finite_number(root.get("confidence"))
    if confidence is None:
        raise InvalidOutputError("confidence must be a number")

    decision = GeneratedOutputDecision(decision_type=decision_type, confidence=confidence)

    attribute, keys = REQUIRED_TEXT_FIELDS[decision_type]
    text = _first_string(root, keys)
    if not text:
        raise InvalidOutputError(f"{keys[0]} is required for {decision_type.value}")
    if decision_type is DecisionType.SPEAK and word_count(text) < min_review_words:
        raise InvalidOutputError(f"review_text must be at least {min_review_words} words for SPEAK")
    setattr(decision, attribute, text)

    # optional fields: keep when well-typed, drop silently otherwise
    anchors = as_string_list(root.get("anchors_used")) or as_string_list(root.get("anchorsUsed"))
    if anchors:
        decision.anchors_used = anchors

    mismatches = root.get("mismatches")
    if isinstance(mismatches, list) and mismatches:
        decision.mismatches = mismatches

    for key in ("structural_match", "structuralMatch"):
        if isinstance(root.get(key), bool):
            decision.structural_match = root[key]
            break

    return decision


def parse_decision(output_text: str, min_review_words: int = MIN_REVIEW_WORDS) -> GeneratedOutputDecision:
    """Tolerant extraction followed by strict validation."""
    return validate_decision(extract_json_object(output_text), min_review_words=min_review_words)
