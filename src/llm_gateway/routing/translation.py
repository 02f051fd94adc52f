"""
Translation flavour of the provider router.

Accepts both camelCase and snake_case request fields so older clients keep
working, composes a translation prompt, dispatches through a ProviderRouter
configured with translation adapters (DeepSeek -> Groq -> OpenAI by default)
and turns whatever the model said into one canonical JSON object string.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

from llm_gateway.errors import GatewayError, InvalidRequestError
from llm_gateway.routing.router import ProviderRouter, parse_provider
from llm_gateway.schemas import Provider, ProviderResult, RouteRequest, RouterError
from llm_gateway.utils.text_cleaning import as_optional_string, strip_code_fence

logger = logging.getLogger(__name__)

TRANSLATION_SYSTEM_PROMPT = "You are a translation engine. Follow instructions exactly."
UNAVAILABLE_MESSAGE = "Translation providers are currently unavailable; please try again later"


@dataclass(frozen=True)
class TranslationRequest:
    source_text: str
    target_lang: str
    source_lang: str = "auto"
    context: Optional[str] = None
    custom_prompt: Optional[str] = None
    provider: Optional[Provider] = None


def _field(body: Dict[str, Any], camel: str, snake: str) -> Any:
    if body.get(camel) is not None:
        return body[camel]
    return body.get(snake)


def merge_context(context: Any, user_message: Any) -> Optional[str]:
    parts = []
    context = as_optional_string(context)
    user_message = as_optional_string(user_message)
    if context:
        parts.append(context)
    if user_message:
        parts.append(f"userMessage: {user_message}")
    return "\n\n".join(parts) or None


def validate_translation_payload(payload: Any, allowed: Sequence[Provider]) -> TranslationRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    source_text = as_optional_string(_field(payload, "sourceText", "source_text"))
    target_lang = as_optional_string(_field(payload, "targetLang", "target_lang"))
    if not source_text:
        raise InvalidRequestError("Missing required field: sourceText/source_text")
    if not target_lang:
        raise InvalidRequestError("Missing required field: targetLang/target_lang")

    return TranslationRequest(
        source_text=source_text,
        target_lang=target_lang,
        source_lang=as_optional_string(_field(payload, "sourceLang", "source_lang")) or "auto",
        context=merge_context(payload.get("context"), _field(payload, "userMessage", "user_message")),
        custom_prompt=as_optional_string(_field(payload, "customPrompt", "custom_prompt")),
        provider=parse_provider(payload.get("provider"), allowed),
    )


def build_translation_prompt(request: TranslationRequest) -> str:
    sections = [
        f"Context:\n{request.context}" if request.context else None,
        f"Source language: {request.source_lang}",
        f"Target language: {request.target_lang}",
        f"Text:\n{request.source_text}",
        f"Output format rules:\n{request.custom_prompt}" if request.custom_prompt else None,
    ]
    return "\n\n".join(section for section in sections if section)


def to_canonical_translation(raw: str, source_text: str) -> str:
    """
    Collapse model output into one compact JSON object string.

    Parseable JSON objects keep their keys with the required ones filled in;
    anything else becomes the translatedText of a wrapper object.
    """
    stripped = strip_code_fence(raw or "")
    try:
        parsed = json.loads(stripped)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        out = dict(parsed)
        if out.get("sourceText") is None:
            out["sourceText"] = source_text
        if out.get("translatedText") is None:
            out["translatedText"] = ""
        if out.get("sourcePronunciation") is None:
            out["sourcePronunciation"] = ""
        return json.dumps(out, ensure_ascii=False, separators=(",", ":"))

    return json.dumps(
        {"sourceText": source_text, "translatedText": stripped, "sourcePronunciation": ""},
        ensure_ascii=False,
        separators=(",", ":"),
    )


class TranslationService:
    def __init__(self, router: ProviderRouter):
        self.router = router

    def translate(self, payload: Any, trace_id: str) -> Union[Dict[str, Any], RouterError]:
        try:
            request = validate_translation_payload(payload, self.router.supported_providers)
            result = self.router.dispatch(
                RouteRequest(
                    input=build_translation_prompt(request),
                    provider=request.provider,
                    system=TRANSLATION_SYSTEM_PROMPT,
                    metadata={"feature": "translation", "target_lang": request.target_lang},
                ),
                trace_id,
            )
        except GatewayError as e:
            return ProviderRouter.to_router_error(e, trace_id)
        except Exception as e:
            logger.error(f"[{trace_id}] translation crashed: {e}", exc_info=True)
            return RouterError(status_code=500, errors=["Internal server error"], trace_id=trace_id)

        return self._to_body(request, result, trace_id)

    @staticmethod
    def _to_body(request: TranslationRequest, result: ProviderResult, trace_id: str) -> Dict[str, Any]:
        body = result.raw_meta.get("body") or {}
        return {
            "translation": to_canonical_translation(result.output_text, request.source_text),
            "detected_source_lang": request.source_lang or "auto",
            "provider": result.provider.value,
            "model": result.model,
            "latency_ms": result.latency_ms,
            "trace_id": trace_id,
            "raw_provider_meta": {
                "model": result.model,
                "usage": body.get("usage") if isinstance(body, dict) else None,
                "id": body.get("id") if isinstance(body, dict) else None,
            },
        }
