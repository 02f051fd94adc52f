"""
Translation Router - translate text through the translation provider chain,
and translation chat through one forced provider
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.dependencies import AppState, get_app_state, get_trace_id
from api.middleware import json_response, read_json_body
from api.schemas.llm import ERROR_RESPONSES
from api.schemas.translation import TranslationChatResponse, TranslationResponse
from llm_gateway.schemas import RouterError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/translation", response_model=TranslationResponse, responses=ERROR_RESPONSES)
async def translate(
    request: Request,
    trace_id: str = Depends(get_trace_id),
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """
    Translate `sourceText` into `targetLang`.

    Accepts camelCase or snake_case fields. `translation` in the response is a
    JSON object string.
    """
    payload = await read_json_body(request)
    outcome = await run_in_threadpool(state.translation_service.translate, payload, trace_id)

    if isinstance(outcome, RouterError):
        return json_response(outcome.status_code, outcome.to_body(), trace_id)

    body = TranslationResponse(**outcome)
    return json_response(200, body.model_dump(), trace_id)


@router.post("/translation/chat", response_model=TranslationChatResponse, responses=ERROR_RESPONSES)
async def translation_chat(
    request: Request,
    trace_id: str = Depends(get_trace_id),
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """
    Continue a translation conversation.

    `messages` is required. `provider` (or the legacy `aiProvider`) picks the
    model and defaults to DeepSeek; there is no fallback. `customPrompt`
    becomes the system message.
    """
    payload = await read_json_body(request)
    outcome = await run_in_threadpool(state.translation_chat_service.chat, payload, trace_id)

    if isinstance(outcome, RouterError):
        return json_response(outcome.status_code, outcome.to_body(), trace_id)

    body = TranslationChatResponse(**outcome)
    return json_response(200, body.model_dump(by_alias=True), trace_id)
