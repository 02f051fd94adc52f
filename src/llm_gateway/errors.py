"""
Error taxonomy for the gateway.

Every failure raised inside the core is a GatewayError carrying one ErrorKind.
HTTP status codes are derived from the kind only at the boundary (status_for),
so adapters and routers never deal in status codes directly.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(Enum):
    VALIDATION = "validation"
    CONFIG = "config"
    UPSTREAM = "upstream"
    TIMEOUT = "timeout"
    INVALID_OUTPUT = "invalid_output"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFIG: 500,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.INVALID_OUTPUT: 502,
}

BODY_SNIPPET_CHARS = 800


class GatewayError(Exception):
    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def describe(self) -> Dict[str, Any]:
        """Short, credential-free summary used in aggregate error details."""
        return {"kind": self.kind.value, "message": self.message}


class InvalidRequestError(GatewayError):
    """Caller payload failed validation. Never triggers an upstream call."""
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or [message]


class ConfigError(GatewayError):
    """A provider credential or endpoint is missing."""
    kind = ErrorKind.CONFIG


class UpstreamError(GatewayError):
    """Non-2xx response, transport failure, or a 2xx body with no usable text."""
    kind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[Any] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, details)
        self.status = status
        self.body = body

    def describe(self) -> Dict[str, Any]:
        summary = super().describe()
        if self.status is not None:
            summary["status"] = self.status
        if self.body is not None:
            summary["body_snippet"] = body_snippet(self.body)
        return summary


class ProviderTimeoutError(GatewayError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout_s: Optional[float] = None) -> None:
        super().__init__(message)
        self.timeout_s = timeout_s


class InvalidOutputError(GatewayError):
    """Model output failed the JSON decision contract."""
    kind = ErrorKind.INVALID_OUTPUT


class ProvidersExhaustedError(UpstreamError):
    """Every provider in an automatic fallback chain failed."""

    def __init__(self, message: str, attempts: List[Dict[str, Any]]) -> None:
        super().__init__(message, details={"attempts": attempts})
        self.attempts = attempts


def status_for(error: GatewayError) -> int:
    return STATUS_BY_KIND[error.kind]


def body_snippet(body: Any) -> str:
    text = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False, default=str)
    return text[:BODY_SNIPPET_CHARS]
