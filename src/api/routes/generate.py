"""
Generation Router - the three public generation operations.

Endpoints:
- POST /api/ai/generate  complete text, JSON {"data": {"text": ...}}
- POST /api/ai/stream    token stream, Server-Sent Events
- POST /api/ai/chat      UI message stream passthrough

Each handler follows the same order: Request Gate (shape, then readiness),
then engine invocation, then Response Adapter. Rejections and upstream
failures before the first byte propagate to the handlers in
src/api/errors.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from src.api.deps import get_generation_engine, get_request_gate, get_settings
from src.api.gate import RequestGate
from src.api.streaming import (
    SSEStreamAdapter,
    complete_text_response,
    sse_response,
    ui_message_stream_response,
)
from src.core.config import Settings
from src.core.exceptions import GenAIGatewayException, ProviderError
from src.models.domain import GenerationOptions, MessagesInput
from src.models.requests import ChatRequest, CompleteTextRequest
from src.models.responses import CompleteTextResponse, ErrorResponse
from src.observability.metrics import record_generation
from src.services.conversion import to_model_messages
from src.services.generation import GenerationEngine


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["Generation"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request or provider not initialized"},
    502: {"model": ErrorResponse, "description": "Upstream provider error"},
}


def build_options(settings: Settings, system: Optional[str]) -> GenerationOptions:
    """Generation options from the request's system text and configured defaults."""
    return GenerationOptions(
        system=system,
        temperature=settings.default_temperature,
        max_output_tokens=settings.default_max_output_tokens,
    )


async def _admit_prompt(request: Request, gate: RequestGate, operation: str) -> CompleteTextRequest:
    try:
        return gate.admit_prompt(await gate.read_json(request))
    except GenAIGatewayException:
        record_generation(operation, "rejected")
        raise


async def _admit_chat(request: Request, gate: RequestGate) -> ChatRequest:
    try:
        return gate.admit_chat(await gate.read_json(request))
    except GenAIGatewayException:
        record_generation("chat", "rejected")
        raise


@router.post(
    "/generate",
    response_model=CompleteTextResponse,
    responses=ERROR_RESPONSES,
)
async def generate(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
    engine: GenerationEngine = Depends(get_generation_engine),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Generate the complete reply to a prompt.

    Request body: {"prompt": "What is 2 + 2?", "system": "optional"}

    Returns:
        200 {"data": {"text": "4"}}

    Raises:
        GatewayValidationError: 400, malformed body
        ProviderNotInitializedError: 400, no credential configured
        ProviderError: 502, upstream failure
    """
    body = await _admit_prompt(request, gate, "complete")
    logger.debug("Complete-text request: prompt_length=%d", len(body.prompt))

    try:
        text = await engine.generate_complete(body.prompt, build_options(settings, body.system))
    except ProviderError:
        record_generation("complete", "error")
        raise

    record_generation("complete", "success")
    return complete_text_response(text)


@router.post(
    "/stream",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Token stream"},
        400: ERROR_RESPONSES[400],
    },
)
async def stream(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
    engine: GenerationEngine = Depends(get_generation_engine),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Stream the reply to a prompt as Server-Sent Events.

    Frames:
        data: {"text": "<fragment>"}   one per fragment, in order
        data: [DONE]                   on completion
        data: {"error": "Stream error"} on upstream failure (terminal)
    """
    body = await _admit_prompt(request, gate, "stream")
    logger.debug("Token-stream request: prompt_length=%d", len(body.prompt))

    fragments = engine.generate_stream(body.prompt, build_options(settings, body.system))
    adapter = SSEStreamAdapter(fragments, buffer_size=settings.stream_buffer_size)
    return sse_response(adapter)


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "UI message stream (v1)"},
        400: ERROR_RESPONSES[400],
    },
)
async def chat(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
    engine: GenerationEngine = Depends(get_generation_engine),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Continue a conversation, streaming the reply as a UI message stream.

    Request body: {"messages": [UIMessage, ...], "system": "optional"}

    The UI messages are converted to model messages before the engine is
    invoked; unsupported part types are rejected with 400.
    """
    body = await _admit_chat(request, gate)

    try:
        messages = await to_model_messages(body.messages)
    except GenAIGatewayException:
        record_generation("chat", "rejected")
        raise

    logger.debug("Chat request: messages=%d", len(messages))
    handle = engine.generate_raw(
        MessagesInput(messages=messages), build_options(settings, body.system)
    )
    return ui_message_stream_response(handle)
