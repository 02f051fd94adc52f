from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Provider(str, Enum):
    DEEPSEEK = "deepseek"
    OPENAI = "openai"
    GROQ = "groq"

    @property
    def display_name(self) -> str:
        return {"deepseek": "DeepSeek", "openai": "OpenAI", "groq": "Groq"}[self.value]


@dataclass(frozen=True)
class RouteRequest:
    """
    Validated router input. Metadata is for logging only and never sent upstream.

    `messages` carries a multi-turn conversation as ({role, content}, ...).
    When set, `input` holds the same turns flattened into one transcript for
    providers that take a single user message.
    """
    input: str
    provider: Optional[Provider] = None
    system: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    messages: Optional[Tuple[Dict[str, str], ...]] = None


@dataclass
class ProviderResult:
    """Normalized output of one successful adapter call"""
    provider: Provider
    model: str
    output_text: str
    raw_meta: Dict[str, Any] = field(default_factory=dict)
    latency_ms: int = 0

    def to_body(self, trace_id: str) -> Dict[str, Any]:
        return {
            "provider": self.provider.value,
            "model": self.model,
            "trace_id": trace_id,
            "output_text": self.output_text,
            "raw_provider_meta": self.raw_meta,
        }


@dataclass
class RouterError:
    """Stable failure envelope returned to HTTP callers"""
    status_code: int
    errors: List[str]
    trace_id: str
    details: Optional[Any] = None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"errors": list(self.errors), "trace_id": self.trace_id}
        if self.details is not None:
            body["details"] = self.details
        return body
