"""Shared fakes for router, service and API tests."""
from typing import Any, Dict, List, Optional, Union

import pytest

from llm_gateway.adapters.base import ProviderAdapter
from llm_gateway.schemas import Provider, ProviderResult, RouteRequest


class FakeAdapter(ProviderAdapter):
    """Adapter that records calls and returns a fixed result or raises a fixed error."""

    def __init__(self, provider: Provider, outcome: Union[str, Exception] = "ok",
                 log: Optional[List[str]] = None, body: Optional[Dict[str, Any]] = None):
        self.provider = provider
        self.outcome = outcome
        self.body = body if body is not None else {"id": "resp-1"}
        self.requests: List[RouteRequest] = []
        self.log = log if log is not None else []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def call(self, request: RouteRequest, trace_id: str) -> ProviderResult:
        self.requests.append(request)
        self.log.append(self.provider.value)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return ProviderResult(
            provider=self.provider,
            model=f"{self.provider.value}-model",
            output_text=self.outcome,
            raw_meta={"status": 200, "headers": {"x-request-id": None}, "body": self.body},
            latency_ms=12,
        )


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def make_adapter(call_log):
    def _make(provider: Provider, outcome: Union[str, Exception] = "ok",
              body: Optional[Dict[str, Any]] = None) -> FakeAdapter:
        return FakeAdapter(provider, outcome, call_log, body)
    return _make
