import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import certifi  # Provides Mozilla's CA bundle for SSL certificate verification
import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ProtocolError, ReadTimeoutError
from urllib3.util.retry import Retry

from llm_gateway.errors import ProviderTimeoutError, UpstreamError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class UpstreamResponse:
    """Fully read provider response. `json` is None when the body is not a JSON object."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    json: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ProviderHTTPClient:
    def __init__(self,
                connect_timeout_s: float = 5.0,
                verify_ssl: bool = True):
        """
        Initializes a requests.Session with:
            - JSON content-type / accept headers
            - HTTPAdapter mounted with zero retries: a failed attempt moves on to
              the next provider instead of being replayed against the same one
        """
        self.session = requests.Session()
        self.connect_timeout_s = connect_timeout_s
        self.verify = certifi.where() if verify_ssl else False

        retry_strategy = Retry(total=0, connect=0, read=0, redirect=0, raise_on_status=False)
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def post_json(self,
                  url: str,
                  payload: Dict[str, Any],
                  headers: Dict[str, str],
                  timeout_s: float) -> UpstreamResponse:
        """
        POST a JSON payload and read the whole body within `timeout_s`.

        Connect and header reads are bounded by the socket timeouts. The body
        is bounded by a watchdog timer armed for whatever is left of the
        deadline: when it fires, the response socket is shut down, which wakes
        any read blocked on a slowly trickling body, and the attempt becomes a
        ProviderTimeoutError. The deadline is also checked between chunks.

        Raises:
            ProviderTimeoutError: deadline exceeded at any stage
            UpstreamError: connection or protocol failure
        """
        deadline = time.monotonic() + timeout_s
        try:
            resp = self.session.post(
                url,
                json=payload,
                headers=headers,
                timeout=(min(self.connect_timeout_s, timeout_s), timeout_s),
                stream=True,
                verify=self.verify,
            )
        except requests.Timeout as e:
            raise _timeout(timeout_s) from e
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e.__class__.__name__}")
            raise UpstreamError(f"Provider request failed: {e.__class__.__name__}") from e

        expired = threading.Event()
        watchdog = threading.Timer(max(deadline - time.monotonic(), 0.0), _expire, args=(resp, expired))
        watchdog.daemon = True
        watchdog.start()

        try:
            chunks = []
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                chunks.append(chunk)
                if expired.is_set() or time.monotonic() > deadline:
                    raise _timeout(timeout_s)
        except requests.ConnectionError as e:
            # iter_content wraps urllib3 read timeouts in ConnectionError
            if expired.is_set() or _is_read_timeout(e):
                raise _timeout(timeout_s) from e
            raise UpstreamError(f"Provider response interrupted: {e.__class__.__name__}") from e
        except (requests.RequestException, ProtocolError) as e:
            if expired.is_set():
                raise _timeout(timeout_s) from e
            raise UpstreamError(f"Provider response interrupted: {e.__class__.__name__}") from e
        except (OSError, ValueError, AttributeError) as e:
            # reads racing the watchdog's shutdown can fail on the torn-down socket
            if expired.is_set():
                raise _timeout(timeout_s) from e
            raise
        finally:
            watchdog.cancel()
            resp.close()

        # a shutdown socket reads as EOF, so a truncated body can end the loop cleanly
        if expired.is_set():
            raise _timeout(timeout_s)

        text = b"".join(chunks).decode(resp.encoding or "utf-8", errors="replace")
        return UpstreamResponse(
            status=resp.status_code,
            headers={k.lower(): v for k, v in resp.headers.items()},
            text=text,
            json=_parse_json_object(text),
        )


def _expire(resp: requests.Response, expired: threading.Event) -> None:
    """Watchdog callback: flag the timeout and stop any read in progress."""
    expired.set()
    try:
        resp.raw.shutdown()
    except (ValueError, RuntimeError, OSError) as e:
        # no shutdown hook on this connection; closing still releases it
        logger.debug(f"Socket shutdown unavailable ({e}); closing response")
        resp.close()


def _timeout(timeout_s: float) -> ProviderTimeoutError:
    return ProviderTimeoutError(
        f"Provider request timed out after {_ms(timeout_s)}ms", timeout_s=timeout_s
    )


def _parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except ValueError:
        logger.debug(f"Non-JSON provider body: {text[:200]}...")
        return None
    return parsed if isinstance(parsed, dict) else None


def _is_read_timeout(error: Exception) -> bool:
    return any(isinstance(arg, ReadTimeoutError) for arg in error.args)


def _ms(seconds: float) -> int:
    return int(seconds * 1000)
