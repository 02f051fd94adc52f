import math
import re
from typing import Any, List, Optional

# A single ```lang ... ``` wrapper around the whole text
FENCE_PATTERN = re.compile(r"^```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```$")


def strip_code_fence(text: str) -> str:
    """
    Remove one fenced code block wrapping the entire text.

    Models asked for "JSON only" still like to answer with ```json ... ```.
    Text that is not fully wrapped is returned trimmed but otherwise untouched.

    Args:
        text (str): Raw model output

    Returns:
        str: Inner content of the fence, or the trimmed input
    """
    trimmed = text.strip()
    match = FENCE_PATTERN.match(trimmed)
    return match.group(1).strip() if match else trimmed


def as_optional_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def as_string_list(value: Any) -> List[str]:
    """Keep only non-blank string items of a list, trimmed."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def as_finite_number(value: Any) -> Optional[float]:
    """
    Coerce numbers and numeric strings to a finite float.

    Booleans are rejected even though bool is an int subclass.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def word_count(text: str) -> int:
    return len(text.split())
