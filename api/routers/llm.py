"""
LLM Router - route a prompt to the first available provider
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.dependencies import AppState, get_app_state, get_trace_id
from api.middleware import json_response, read_json_body
from api.schemas.llm import ERROR_RESPONSES, RouteResponse
from llm_gateway.schemas import RouterError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/route", response_model=RouteResponse, responses=ERROR_RESPONSES)
async def route_prompt(
    request: Request,
    trace_id: str = Depends(get_trace_id),
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """
    Send `input` (and optional `system`) to a provider.

    With `provider` set only that provider is called; otherwise providers are
    tried in configured order and the first success is returned.
    """
    payload = await read_json_body(request)
    outcome = await run_in_threadpool(state.llm_router.route, payload, trace_id)

    if isinstance(outcome, RouterError):
        return json_response(outcome.status_code, outcome.to_body(), trace_id)

    body = RouteResponse(**outcome.to_body(trace_id))
    return json_response(200, body.model_dump(), trace_id)
