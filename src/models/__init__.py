"""Models Package - domain types and request/response models."""

from src.models.domain import (
    DEFAULT_MODEL,
    GenerationInput,
    GenerationOptions,
    MessagesInput,
    ModelIdentifier,
    ModelMessage,
    PromptInput,
    UIMessage,
    UIMessagePart,
    resolve_model,
)
from src.models.requests import ChatRequest, CompleteTextRequest
from src.models.responses import (
    CompleteTextResponse,
    ErrorDetail,
    ErrorResponse,
    StreamErrorEvent,
    TextData,
    TextFragmentEvent,
)

__all__ = [
    # Domain
    "DEFAULT_MODEL",
    "GenerationInput",
    "GenerationOptions",
    "MessagesInput",
    "ModelIdentifier",
    "ModelMessage",
    "PromptInput",
    "UIMessage",
    "UIMessagePart",
    "resolve_model",
    # Requests
    "ChatRequest",
    "CompleteTextRequest",
    # Responses
    "CompleteTextResponse",
    "ErrorDetail",
    "ErrorResponse",
    "StreamErrorEvent",
    "TextData",
    "TextFragmentEvent",
]
