"""
Provider router - validation, forced vs automatic provider selection, and the
mapping of failures onto the stable RouterError envelope.

Forced provider: exactly one adapter is called and its failure is surfaced
(ConfigError -> 500, timeout -> 504, anything else -> 502 naming the provider).
Automatic: adapters are attempted sequentially in configured order; failures
are logged and skipped, the first success wins, and only a fully exhausted
chain produces an aggregate 502.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from llm_gateway.adapters.base import ProviderAdapter
from llm_gateway.errors import (
    ConfigError,
    GatewayError,
    InvalidRequestError,
    ProvidersExhaustedError,
    ProviderTimeoutError,
    UpstreamError,
    status_for,
)
from llm_gateway.schemas import Provider, ProviderResult, RouteRequest, RouterError

logger = logging.getLogger(__name__)

DEFAULT_UNAVAILABLE_MESSAGE = "LLM providers are currently unavailable; please try again later"


def parse_provider(raw: Any, allowed: Sequence[Provider]) -> Optional[Provider]:
    """Case-insensitive provider lookup restricted to `allowed`. None means automatic."""
    if raw is None:
        return None
    names = [p.value for p in allowed]
    expected = " or ".join(f'"{name}"' for name in names)
    if not isinstance(raw, str):
        raise InvalidRequestError("provider must be a string when provided")
    lowered = raw.strip().lower()
    if lowered not in names:
        raise InvalidRequestError(f"provider must be {expected}")
    return Provider(lowered)


def validate_route_payload(payload: Any, allowed: Sequence[Provider]) -> RouteRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    text = payload.get("input")
    system = payload.get("system")
    metadata = payload.get("metadata")

    if not isinstance(text, str) or not text.strip():
        raise InvalidRequestError("input is required and must be a string")
    if system is not None and not isinstance(system, str):
        raise InvalidRequestError("system must be a string when provided")
    if metadata is not None and not isinstance(metadata, dict):
        raise InvalidRequestError("metadata must be an object when provided")

    return RouteRequest(
        input=text,
        provider=parse_provider(payload.get("provider"), allowed),
        system=system or None,
        metadata=metadata,
    )


def attempt_in_order(adapters: Sequence[ProviderAdapter],
                     call: Callable[[ProviderAdapter], ProviderResult],
                     unavailable_message: str = DEFAULT_UNAVAILABLE_MESSAGE) -> ProviderResult:
    """
    Return the first successful call, trying adapters strictly in sequence.

    Every failure is recorded and skipped. Raises ProvidersExhaustedError with
    one summary per attempt once the list is exhausted.
    """
    attempts: List[Dict[str, Any]] = []
    for adapter in adapters:
        try:
            return call(adapter)
        except GatewayError as e:
            logger.warning(f"{adapter.provider.value} failed ({e.kind.value}): {e.message}; trying next provider")
            attempts.append({"provider": adapter.provider.value, **e.describe()})
        except Exception as e:
            logger.warning(f"{adapter.provider.value} raised unexpectedly: {e}", exc_info=True)
            attempts.append({"provider": adapter.provider.value, "kind": "unexpected",
                             "message": e.__class__.__name__})
    raise ProvidersExhaustedError(unavailable_message, attempts)


class ProviderRouter:
    def __init__(self,
                 adapters: Mapping[Provider, ProviderAdapter],
                 order: Optional[Sequence[Provider]] = None,
                 unavailable_message: str = DEFAULT_UNAVAILABLE_MESSAGE,
                 label: str = "llm"):
        """
        Args:
            adapters: adapter per provider
            order: fallback priority; defaults to the mapping's insertion order
            unavailable_message: primary error when every provider failed
            label: short name of the use case, for logs
        """
        order = list(order) if order is not None else list(adapters)
        missing = [p.value for p in order if p not in adapters]
        if missing:
            raise ValueError(f"No adapter configured for: {missing}")
        if not order:
            raise ValueError("At least one provider must be configured")
        self._adapters = dict(adapters)
        self._order = order
        self.unavailable_message = unavailable_message
        self.label = label

    @property
    def supported_providers(self) -> List[Provider]:
        return list(self._order)

    def validate(self, payload: Any) -> RouteRequest:
        return validate_route_payload(payload, self._order)

    def route(self, payload: Any, trace_id: str) -> Union[ProviderResult, RouterError]:
        """Validate and dispatch. Always returns exactly one of result or error."""
        try:
            request = self.validate(payload)
            return self.dispatch(request, trace_id)
        except GatewayError as e:
            return self.to_router_error(e, trace_id)
        except Exception as e:
            logger.error(f"[{trace_id}] {self.label} router crashed: {e}", exc_info=True)
            return RouterError(status_code=500, errors=["Internal server error"], trace_id=trace_id)

    def dispatch(self, request: RouteRequest, trace_id: str) -> ProviderResult:
        """Run a validated request. Raises GatewayError on failure."""
        if request.metadata:
            logger.debug(f"[{trace_id}] {self.label} metadata: {request.metadata}")

        if request.provider is not None:
            return self._forced(request.provider, request, trace_id)

        adapters = [self._adapters[p] for p in self._order]
        return attempt_in_order(
            adapters,
            lambda adapter: self._attempt(adapter, request, trace_id),
            self.unavailable_message,
        )

    def _forced(self, provider: Provider, request: RouteRequest, trace_id: str) -> ProviderResult:
        adapter = self._adapters[provider]
        name = provider.display_name
        try:
            return self._attempt(adapter, request, trace_id)
        except ConfigError as e:
            raise ConfigError(e.message, details={"provider": provider.value}) from e
        except ProviderTimeoutError as e:
            timeout = ProviderTimeoutError(
                f"{name} request timed out; please try again later", timeout_s=e.timeout_s
            )
            timeout.details = {"provider": provider.value, **e.describe()}
            raise timeout from e
        except GatewayError as e:
            raise UpstreamError(
                f"{name} is currently unavailable; please try again later",
                details={"provider": provider.value, **e.describe()},
            ) from e

    def _attempt(self, adapter: ProviderAdapter, request: RouteRequest, trace_id: str) -> ProviderResult:
        started = time.monotonic()
        try:
            result = adapter.call(request, trace_id)
        except GatewayError as e:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.warning(
                f"[{trace_id}] {self.label}: {adapter.provider.value} {e.kind.value} after {elapsed}ms"
            )
            raise
        logger.info(
            f"[{trace_id}] {self.label}: {adapter.provider.value} answered with {result.model} "
            f"in {result.latency_ms}ms"
        )
        return result

    @staticmethod
    def to_router_error(error: GatewayError, trace_id: str) -> RouterError:
        errors = error.errors if isinstance(error, InvalidRequestError) else [error.message]
        return RouterError(
            status_code=status_for(error),
            errors=list(errors),
            trace_id=trace_id,
            details=error.details,
        )
