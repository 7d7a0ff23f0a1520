"""
Request Gate - admission checks for the generation operations.

Each request body is checked in two steps before any engine work starts:

1. Shape: the body is a JSON object matching the operation's request
   model (non-empty `prompt` string, or non-empty `messages` list of UI
   message objects). Failures raise GatewayValidationError.
2. Readiness: the provider binding is ready. Otherwise the gate raises
   ProviderNotInitializedError without attempting any network call.

Both are client errors (HTTP 400). Bodies are parsed here rather than by
FastAPI's automatic validation so shape failures share the gateway's 400
envelope instead of FastAPI's 422.
"""

import json
import logging
from typing import Any, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from src.core.exceptions import GatewayValidationError, ProviderNotInitializedError
from src.models.requests import ChatRequest, CompleteTextRequest
from src.providers.binding import ProviderBinding


logger = logging.getLogger(__name__)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _error_field(error: dict[str, Any]) -> str:
    """Render a pydantic error location as a dotted/indexed path."""
    path = ""
    for part in error.get("loc", ()):
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "body"


class RequestGate:
    """
    Validates request payloads and provider readiness.

    Args:
        binding: The process-wide ProviderBinding.

    Example:
        >>> gate = RequestGate(binding)
        >>> body = gate.admit_prompt({"prompt": "What is 2 + 2?"})
        >>> body.prompt
        'What is 2 + 2?'
    """

    def __init__(self, binding: ProviderBinding) -> None:
        self._binding = binding

    async def read_json(self, request: Request) -> Any:
        """
        Read and decode the request body.

        Raises:
            GatewayValidationError: If the body is empty or not valid JSON.
        """
        raw = await request.body()
        if not raw.strip():
            raise GatewayValidationError("Request body is required", field="body")
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise GatewayValidationError(f"Malformed JSON body: {e}", field="body") from e

    def admit_prompt(self, payload: Any) -> CompleteTextRequest:
        """
        Admit a complete-text or token-stream request.

        Raises:
            GatewayValidationError: If `prompt` is missing, empty or not a string.
            ProviderNotInitializedError: If the binding is not ready.
        """
        body = self._validate(CompleteTextRequest, payload)
        self._require_ready()
        return body

    def admit_chat(self, payload: Any) -> ChatRequest:
        """
        Admit a chat request.

        Raises:
            GatewayValidationError: If `messages` is missing, empty or malformed.
            ProviderNotInitializedError: If the binding is not ready.
        """
        body = self._validate(ChatRequest, payload)
        self._require_ready()
        return body

    def _validate(self, model: Type[RequestModel], payload: Any) -> RequestModel:
        if not isinstance(payload, dict):
            raise GatewayValidationError(
                "Request body must be a JSON object",
                field="body",
                value=type(payload).__name__,
            )
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            field = _error_field(first)
            raise GatewayValidationError(f"Invalid '{field}': {first['msg']}", field=field) from e

    def _require_ready(self) -> None:
        if not self._binding.is_ready():
            logger.warning("Request rejected: provider binding is not ready")
            raise ProviderNotInitializedError()
