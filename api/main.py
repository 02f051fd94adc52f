"""
LLM Gateway - FastAPI Application

Main entry point for the API server.
Environment-agnostic: configuration reads from settings (.env file).
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from llm_gateway.errors import GatewayError
from llm_gateway.logging_setup import setup_logging
from llm_gateway.routing.router import ProviderRouter
from llm_gateway.settings import get_settings
from api.dependencies import AppState, get_trace_id, lifespan_handler, require_bearer_token
from api.middleware import TraceIdMiddleware, json_response
from api.routers import health, llm, reviews, translation

# Get settings
cfg = get_settings()

# Configure logging
setup_logging(cfg.log_level)
logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    """Render every failure into the {errors, trace_id} envelope."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        trace_id = get_trace_id(request)
        error = ProviderRouter.to_router_error(exc, trace_id)
        return json_response(error.status_code, error.to_body(), trace_id)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        trace_id = get_trace_id(request)
        response = json_response(exc.status_code, {"errors": [str(exc.detail)], "trace_id": trace_id}, trace_id)
        for name, value in (exc.headers or {}).items():
            response.headers[name] = value
        return response

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        trace_id = get_trace_id(request)
        logger.error(f"[{trace_id}] unhandled error on {request.url.path}: {exc}", exc_info=True)
        return json_response(500, {"errors": ["Internal server error"], "trace_id": trace_id}, trace_id)


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        state: prebuilt AppState (tests inject fake routers here). Defaults to
            one built from settings.

    Returns:
        Configured FastAPI application instance
    """
    state = state or AppState(cfg)

    app = FastAPI(
        title="LLM Gateway",
        description="Routes prompts, translations and review generation across LLM providers with ordered fallback",
        version="0.1.0",
        lifespan=lifespan_handler
    )
    app.state.gateway = state

    app.add_middleware(TraceIdMiddleware)

    # CORS configuration from settings
    logger.info(f"Configuring CORS with origins: {state.settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=state.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["x-trace-id"],
    )

    _register_exception_handlers(app)

    protected = [Depends(require_bearer_token)]
    app.include_router(llm.router, prefix="/api/v1/llm", tags=["llm"], dependencies=protected)
    app.include_router(
        translation.router, prefix="/api/v1", tags=["translation"], dependencies=protected
    )
    app.include_router(reviews.router, prefix="/api/v1/reviews", tags=["reviews"], dependencies=protected)
    app.include_router(health.router, prefix="/api/v1/health", tags=["health"])

    @app.get("/")
    async def root():
        """Root endpoint - API info"""
        return {
            "name": "LLM Gateway",
            "version": "0.1.0",
            "environment": state.settings.env,
            "status": "running",
            "docs": "/docs",
            "health": "/api/v1/health/ready"
        }

    logger.info(f"FastAPI application created (env={state.settings.env})")

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting API server on {cfg.api_host}:{cfg.api_port}")
    logger.info(f"Environment: {cfg.env}")
    logger.info(f"Reload: {cfg.api_reload}")
    logger.info(f"Workers: {cfg.api_workers}")

    uvicorn.run(
        "api.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.api_reload,
        workers=cfg.api_workers if not cfg.api_reload else 1,  # Workers only work without reload
        log_level=cfg.log_level.lower()
    )
