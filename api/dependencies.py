"""
API Dependencies - Singleton state management and FastAPI dependency injection

Routers and services are built lazily on first use. Provider credentials are
not checked here; a missing key only surfaces when that provider is called.
"""

import hmac
import logging
import threading
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from llm_gateway.adapters.registry import (
    build_chat_adapters,
    build_llm_adapters,
    build_translation_adapters,
)
from llm_gateway.review.service import ReviewService
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.routing.translation import UNAVAILABLE_MESSAGE, TranslationService
from llm_gateway.routing.translation_chat import TranslationChatService
from llm_gateway.schemas import Provider
from llm_gateway.settings import (
    Settings,
    get_deepseek_settings,
    get_groq_settings,
    get_openai_settings,
    get_settings,
)

logger = logging.getLogger(__name__)

TRACE_HEADERS = ("x-trace-id", "trace-id", "x-request-id")


class AppState:
    """
    Application state shared across requests.

    Pass prebuilt routers to swap providers out (tests do this); anything left
    as None is built from settings on first access.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 llm_router: Optional[ProviderRouter] = None,
                 translation_router: Optional[ProviderRouter] = None,
                 chat_router: Optional[ProviderRouter] = None):
        self.settings = settings or get_settings()
        self._llm_router = llm_router
        self._translation_router = translation_router
        self._chat_router = chat_router
        self._translation_service: Optional[TranslationService] = None
        self._translation_chat_service: Optional[TranslationChatService] = None
        self._review_service: Optional[ReviewService] = None
        self._lock = threading.Lock()

    @property
    def llm_router(self) -> ProviderRouter:
        with self._lock:
            if self._llm_router is None:
                logger.info("Building LLM router...")
                self._llm_router = ProviderRouter(
                    build_llm_adapters(self.settings),
                    self.settings.llm_provider_order,
                    label="llm",
                )
            return self._llm_router

    @property
    def translation_router(self) -> ProviderRouter:
        with self._lock:
            if self._translation_router is None:
                logger.info("Building translation router...")
                self._translation_router = ProviderRouter(
                    build_translation_adapters(self.settings),
                    self.settings.translation_provider_order,
                    unavailable_message=UNAVAILABLE_MESSAGE,
                    label="translation",
                )
            return self._translation_router

    @property
    def chat_router(self) -> ProviderRouter:
        with self._lock:
            if self._chat_router is None:
                logger.info("Building translation chat router...")
                self._chat_router = ProviderRouter(
                    build_chat_adapters(self.settings),
                    self.settings.chat_provider_order,
                    label="translation_chat",
                )
            return self._chat_router

    @property
    def translation_service(self) -> TranslationService:
        if self._translation_service is None:
            self._translation_service = TranslationService(self.translation_router)
        return self._translation_service

    @property
    def translation_chat_service(self) -> TranslationChatService:
        if self._translation_chat_service is None:
            self._translation_chat_service = TranslationChatService(self.chat_router)
        return self._translation_chat_service

    @property
    def review_service(self) -> ReviewService:
        if self._review_service is None:
            self._review_service = ReviewService(
                self.llm_router, min_review_words=self.settings.review_min_words
            )
        return self._review_service

    def credentials(self) -> Dict[str, bool]:
        """Which providers have an API key configured. Never the keys themselves."""
        keys = {
            Provider.DEEPSEEK: get_deepseek_settings().api_key,
            Provider.OPENAI: get_openai_settings().api_key,
            Provider.GROQ: get_groq_settings().api_key,
        }
        return {
            provider.value: bool(key is not None and key.get_secret_value().strip())
            for provider, key in keys.items()
        }

    def bearer_token(self) -> Optional[str]:
        """Configured API token, or None when unset or blank."""
        token = self.settings.bearer_token
        value = token.get_secret_value().strip() if token is not None else ""
        return value or None

    def get_status(self) -> Dict[str, Any]:
        return {
            "env": self.settings.env,
            "llm_providers": [p.value for p in self.settings.llm_provider_order],
            "translation_providers": [p.value for p in self.settings.translation_provider_order],
            "chat_providers": [p.value for p in self.settings.chat_provider_order],
            "credentials": self.credentials(),
            "auth_configured": self.bearer_token() is not None,
        }


# Global singleton instance, created on first request
app_state: Optional[AppState] = None


def get_app_state(request: Request) -> AppState:
    """
    FastAPI dependency to access app state.

    Prefers the state attached by create_app, falls back to the module singleton.
    """
    global app_state
    state = getattr(request.app.state, "gateway", None)
    if state is not None:
        return state
    if app_state is None:
        app_state = AppState()
    return app_state


def resolve_trace_id(headers) -> str:
    for name in TRACE_HEADERS:
        value = headers.get(name)
        if value and value.strip():
            return value.strip()
    return str(uuid.uuid4())


def get_trace_id(request: Request) -> str:
    trace_id = getattr(request.state, "trace_id", None)
    if not trace_id:
        trace_id = resolve_trace_id(request.headers)
        request.state.trace_id = trace_id
    return trace_id


def require_bearer_token(request: Request, state: AppState = Depends(get_app_state)) -> None:
    """Reject requests without the configured bearer token."""
    expected = state.bearer_token()
    if expected is None:
        logger.error("APP_BEARER_TOKEN is not configured; refusing request")
        raise HTTPException(status_code=500, detail="Server auth is not configured")

    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Missing bearer token")
    if not hmac.compare_digest(token.strip().encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid bearer token")


@asynccontextmanager
async def lifespan_handler(app):
    """
    FastAPI lifespan context manager for startup/shutdown.

    Usage in main.py:
        app = FastAPI(lifespan=lifespan_handler)
    """
    logger.info("FastAPI starting up...")
    state = getattr(app.state, "gateway", None)
    if state is not None:
        logger.info(f"Gateway status: {state.get_status()}")
    yield
    logger.info("FastAPI shutting down...")
