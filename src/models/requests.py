"""
Request Models - bodies accepted by the three generation operations.

These models are validated by the Request Gate (src/api/gate.py) rather than
by FastAPI's automatic body parsing, so that every shape failure is reported
as a 400 client error with the gateway's error envelope.

Anti-Patterns Avoided:
- Optional fields use Optional[T] with explicit None default
- Strict string types: numbers or lists are never coerced into a prompt
"""

from typing import Optional

from pydantic import BaseModel, Field, StrictStr

from src.models.domain import UIMessage


class CompleteTextRequest(BaseModel):
    """
    Body for the complete-text and token-stream operations.

    Required Fields:
        prompt: Non-empty prompt text

    Optional Fields:
        system: System instruction text
    """

    prompt: StrictStr = Field(..., min_length=1, description="Prompt text")
    system: Optional[StrictStr] = Field(default=None, description="System instruction")

    model_config = {"extra": "ignore"}


class ChatRequest(BaseModel):
    """
    Body for the chat operation.

    Conversational clients post their whole UI message state plus their own
    bookkeeping fields (chat id, trigger); unknown fields are ignored.

    Required Fields:
        messages: Non-empty ordered list of UI messages

    Optional Fields:
        system: System instruction text
    """

    messages: list[UIMessage] = Field(..., min_length=1, description="Conversation")
    system: Optional[StrictStr] = Field(default=None, description="System instruction")

    model_config = {"extra": "ignore"}
