"""
Reviews Router - generate one review decision from a user taste bundle
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from api.dependencies import AppState, get_app_state, get_trace_id
from api.middleware import json_response, read_json_body
from api.schemas.reviews import ReviewEnvelope
from llm_gateway.errors import InvalidRequestError
from llm_gateway.review.schemas import GenerateReviewRequest, validation_messages

router = APIRouter()
logger = logging.getLogger(__name__)


def _envelope(status_code, errors, started, trace_id, data=None) -> JSONResponse:
    envelope = ReviewEnvelope(
        status_code=status_code,
        errors=errors,
        latency=int((time.monotonic() - started) * 1000),
        data=data,
        trace_id=trace_id,
    )
    return json_response(status_code, envelope.to_body(), trace_id)


@router.post("/generate", response_model=ReviewEnvelope, response_model_by_alias=True)
async def generate_review(
    request: Request,
    trace_id: str = Depends(get_trace_id),
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """
    Generate a SPEAK / SILENCE / EXPLAIN_CONFLICT / ASK_LIGHT_QUESTION decision.

    A closed gate short-circuits to SILENCE without calling any provider.
    """
    started = time.monotonic()

    try:
        payload = GenerateReviewRequest.model_validate(await read_json_body(request))
    except InvalidRequestError as e:
        return _envelope(400, e.errors, started, trace_id)
    except ValidationError as e:
        errors = validation_messages(e)
        logger.info(f"[{trace_id}] review request rejected: {errors}")
        return _envelope(400, errors, started, trace_id)

    outcome = await run_in_threadpool(state.review_service.generate, payload, trace_id)
    data = outcome.data.as_dict() if outcome.data is not None else None
    return _envelope(outcome.status_code, outcome.errors, started, trace_id, data)
