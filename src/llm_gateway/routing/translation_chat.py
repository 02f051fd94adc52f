"""
Translation chat: a multi-turn conversation forwarded to one provider.

The provider is always forced (DeepSeek unless the caller picks another), so
there is no fallback. `provider` wins over the legacy `aiProvider` field.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from llm_gateway.errors import GatewayError, InvalidRequestError
from llm_gateway.routing.router import ProviderRouter, parse_provider
from llm_gateway.schemas import Provider, RouteRequest, RouterError
from llm_gateway.utils.text_cleaning import as_optional_string

logger = logging.getLogger(__name__)

MESSAGES_REQUIRED = "messages[] required"


@dataclass(frozen=True)
class ChatRequest:
    turns: Tuple[Dict[str, str], ...]
    provider: Provider
    system: Optional[str] = None


def normalize_turn(raw: Any) -> Optional[Dict[str, str]]:
    """{role, content} with role defaulting to user; None when there is no text."""
    if not isinstance(raw, dict):
        return None
    role = raw.get("role") if isinstance(raw.get("role"), str) else "user"
    content = raw.get("content")
    if isinstance(content, dict):
        content = content.get("text")
    if not isinstance(content, str) or not content.strip():
        return None
    return {"role": role, "content": content}


def validate_chat_payload(payload: Any, allowed: Sequence[Provider]) -> ChatRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    messages = payload.get("messages")
    if not isinstance(messages, list) or not messages:
        raise InvalidRequestError(MESSAGES_REQUIRED)
    turns = [turn for turn in (normalize_turn(m) for m in messages) if turn]
    if not turns:
        raise InvalidRequestError(MESSAGES_REQUIRED)

    raw_provider = payload.get("provider")
    if raw_provider is None:
        raw_provider = payload.get("aiProvider")
    provider = parse_provider(raw_provider, allowed) or Provider.DEEPSEEK
    if provider not in allowed:
        provider = allowed[0]

    return ChatRequest(
        turns=tuple(turns),
        provider=provider,
        system=as_optional_string(payload.get("customPrompt")),
    )


def build_transcript(turns: Sequence[Dict[str, str]]) -> str:
    return "\n\n".join(f"{turn['role']}: {turn['content']}" for turn in turns)


class TranslationChatService:
    def __init__(self, router: ProviderRouter):
        self.router = router

    def chat(self, payload: Any, trace_id: str) -> Union[Dict[str, Any], RouterError]:
        """Reply to the conversation, or a RouterError. Never raises."""
        try:
            request = validate_chat_payload(payload, self.router.supported_providers)
            result = self.router.dispatch(
                RouteRequest(
                    input=build_transcript(request.turns),
                    provider=request.provider,
                    system=request.system,
                    metadata={"feature": "translationChat", "turns": len(request.turns)},
                    messages=request.turns,
                ),
                trace_id,
            )
        except GatewayError as e:
            return ProviderRouter.to_router_error(e, trace_id)
        except Exception as e:
            logger.error(f"[{trace_id}] translation chat crashed: {e}", exc_info=True)
            return RouterError(status_code=500, errors=["Internal server error"], trace_id=trace_id)

        return {
            "reply": result.output_text,
            "traceId": trace_id,
            "aiProvider": result.provider.value,
            "latency_ms": result.latency_ms,
        }
