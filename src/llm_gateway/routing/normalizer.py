"""
Response normalizer - pull one output string out of any known provider body.

Upstream providers answer in different shapes (responses API output blocks,
chat completions, plain text fields). Each shape is handled by a pure rule
function; rules are tried in OUTPUT_TEXT_RULES order and the first non-blank
string wins.
"""

from typing import Any, Callable, List, Optional, Tuple

from llm_gateway.utils.text_cleaning import as_optional_string

Rule = Callable[[Any], Optional[str]]

FALLBACK_FIELDS = ("text", "output", "result", "response")


def _text_or_value(value: Any) -> Optional[str]:
    """A block field is either a plain string or an object like {"value": "..."}."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("value"), str):
        return value["value"]
    return None


def top_level_output_text(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    return as_optional_string(body.get("output_text"))


def output_blocks(body: Any) -> Optional[str]:
    if not isinstance(body, dict) or not isinstance(body.get("output"), list):
        return None

    parts: List[str] = []
    for item in body["output"]:
        if not isinstance(item, dict) or not isinstance(item.get("content"), list):
            continue
        for block in item["content"]:
            if not isinstance(block, dict):
                continue
            for key in ("text", "content"):
                text = _text_or_value(block.get(key))
                if text is not None:
                    parts.append(text)
    return as_optional_string("".join(parts))


def chat_completion_content(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    return as_optional_string(message.get("content"))


def fallback_fields(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for key in FALLBACK_FIELDS:
        text = as_optional_string(body.get(key))
        if text:
            return text
    return None


OUTPUT_TEXT_RULES: Tuple[Rule, ...] = (
    top_level_output_text,
    output_blocks,
    chat_completion_content,
    fallback_fields,
)


def extract_output_text(body: Any, rules: Tuple[Rule, ...] = OUTPUT_TEXT_RULES) -> Optional[str]:
    """Return the first non-blank string produced by the rules, or None."""
    for rule in rules:
        text = rule(body)
        if text:
            return text
    return None
