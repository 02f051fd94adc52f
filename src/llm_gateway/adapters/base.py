"""
Provider adapter contract and the shared HTTP call path.

An adapter turns a RouteRequest into one provider-specific POST and the
provider's answer back into a ProviderResult. Subclasses only decide the
request shape (build_payload); credentials, the timeout, status handling and
text extraction are shared here.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import SecretStr

from llm_gateway.adapters.client import ProviderHTTPClient, UpstreamResponse
from llm_gateway.errors import ConfigError, UpstreamError
from llm_gateway.routing.normalizer import extract_output_text
from llm_gateway.schemas import Provider, ProviderResult, RouteRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdapterConfig:
    url: str
    model: str
    api_key: Optional[SecretStr]
    key_env: str  # environment variable named in ConfigError messages
    timeout_s: float
    temperature: float = 0.7
    max_tokens: int = 1024


class ProviderAdapter(ABC):
    """Abstract adapter. Routers depend only on this interface."""

    provider: Provider

    @abstractmethod
    def call(self, request: RouteRequest, trace_id: str) -> ProviderResult:
        """
        Execute one upstream attempt.

        Raises:
            ConfigError: credential or endpoint missing (no network call made)
            UpstreamError: non-2xx status, transport failure, or no usable text
            ProviderTimeoutError: the attempt exceeded its timeout
        """
        pass


class HTTPProviderAdapter(ProviderAdapter):
    def __init__(self, config: AdapterConfig, client: Optional[ProviderHTTPClient] = None):
        if config.timeout_s <= 0:
            raise ValueError(f"{self.provider.value} adapter needs a positive timeout")
        self.config = config
        self._client = client or ProviderHTTPClient()

    @property
    def model(self) -> str:
        return self.config.model

    @abstractmethod
    def build_payload(self, request: RouteRequest) -> Dict[str, Any]:
        pass

    def _credential(self) -> str:
        key = self.config.api_key.get_secret_value().strip() if self.config.api_key else ""
        if not key:
            raise ConfigError(f"{self.config.key_env} missing")
        if not self.config.url:
            raise ConfigError(f"{self.provider.display_name} endpoint URL missing")
        return key

    def call(self, request: RouteRequest, trace_id: str) -> ProviderResult:
        key = self._credential()
        started = time.monotonic()
        response = self._client.post_json(
            self.config.url,
            self.build_payload(request),
            headers={
                "Authorization": f"Bearer {key}",
                "x-trace-id": trace_id,
            },
            timeout_s=self.config.timeout_s,
        )
        latency_ms = int((time.monotonic() - started) * 1000)

        if not response.ok:
            logger.error(
                f"[{trace_id}] {self.provider.display_name} HTTP {response.status}: {response.text[:200]}"
            )
            raise UpstreamError(
                f"{self.provider.display_name} HTTP {response.status}",
                status=response.status,
                body=response.json if response.json is not None else response.text,
            )

        output_text = extract_output_text(response.json)
        if not output_text:
            raise UpstreamError(
                f"Provider {self.provider.value} returned no recognizable text field",
                status=response.status,
                body=response.json if response.json is not None else response.text,
            )

        return ProviderResult(
            provider=self.provider,
            model=self.config.model,
            output_text=output_text,
            raw_meta=self._raw_meta(response),
            latency_ms=latency_ms,
        )

    def _raw_meta(self, response: UpstreamResponse) -> Dict[str, Any]:
        return {
            "status": response.status,
            "headers": {"x-request-id": response.headers.get("x-request-id")},
            "body": response.json if response.json is not None else {},
        }
