"""
Domain Models - generation inputs, options and the two message formats.

This module contains the internal value objects that flow between the
Request Gate, the Message Format Converter and the Generation Engine:

- ModelIdentifier: the fixed set of supported upstream model names
- GenerationOptions: optional system text, temperature, output budget
- UIMessage / UIMessagePart: the rich multi-part format clients keep as state
- ModelMessage: the flat role/content format the provider consumes
- PromptInput / MessagesInput: explicit tagged variants of a generation input

Pattern: Domain models as value objects (frozen Pydantic models)
Pattern: Tagged union with an explicit discriminator field
"""

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# =============================================================================
# Model Identifiers
# =============================================================================


class ModelIdentifier(str, Enum):
    """Supported upstream model names."""

    GEMINI_2_5_PRO = "gemini-2.5-pro"
    GEMINI_2_5_FLASH = "gemini-2.5-flash"
    GEMINI_2_5_FLASH_LITE = "gemini-2.5-flash-lite"
    GEMINI_2_0_FLASH = "gemini-2.0-flash"
    GEMINI_2_0_FLASH_LITE = "gemini-2.0-flash-lite"
    GEMINI_1_5_PRO = "gemini-1.5-pro"
    GEMINI_1_5_FLASH = "gemini-1.5-flash"


DEFAULT_MODEL = ModelIdentifier.GEMINI_2_0_FLASH


def resolve_model(name: Optional[str]) -> ModelIdentifier:
    """
    Resolve a configured model name against the supported set.

    Unknown names do not fail: configuration only fails loudly on a missing
    credential, so an unrecognized model becomes the default (with a warning).

    Args:
        name: Model name from configuration (may be None or empty).

    Returns:
        The matching ModelIdentifier, or DEFAULT_MODEL.

    Example:
        >>> resolve_model("gemini-1.5-pro")
        <ModelIdentifier.GEMINI_1_5_PRO: 'gemini-1.5-pro'>
        >>> resolve_model("gpt-4") is DEFAULT_MODEL
        True
    """
    if not name:
        return DEFAULT_MODEL
    try:
        return ModelIdentifier(name)
    except ValueError:
        logger.warning(
            "Unknown model %r, falling back to %s", name, DEFAULT_MODEL.value
        )
        return DEFAULT_MODEL


# =============================================================================
# Generation Options
# =============================================================================


DEFAULT_TEMPERATURE = 0.7


class GenerationOptions(BaseModel):
    """
    Optional generation knobs.

    temperature and max_output_tokens are passed through to the provider
    without local range checks.

    Attributes:
        system: System instruction text.
        temperature: Sampling temperature (default 0.7).
        max_output_tokens: Maximum output token budget.
    """

    system: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: Optional[int] = None

    model_config = {"frozen": True}


# =============================================================================
# Model Messages (flat format)
# =============================================================================


Role = Literal["user", "assistant", "system"]


class ModelMessage(BaseModel):
    """
    Flat role/content message understood by the provider.

    Attributes:
        role: Message role (user, assistant, system).
        content: Plain text, or a list of structured content items.
    """

    role: Role
    content: Union[str, list[dict[str, Any]]] = ""

    model_config = {"frozen": True}


# =============================================================================
# UI Messages (rich format)
# =============================================================================


class UIMessagePart(BaseModel):
    """
    One typed content part of a UI message.

    Only the `type` discriminator is mandatory; type-specific payload fields
    (text, toolCallId, url, data, ...) are kept as extra attributes.

    Example:
        >>> UIMessagePart(type="text", text="Hello!")
    """

    type: str = Field(..., min_length=1, description="Part type discriminator")
    text: Optional[str] = None

    model_config = {"extra": "allow", "frozen": True}


class UIMessage(BaseModel):
    """
    Client-side conversational message with ordered typed parts.

    Attributes:
        id: Opaque client-assigned identifier.
        role: Message role (user, assistant, system).
        parts: Ordered content parts; may be empty.
        metadata: Free-form client metadata (ignored by the gateway).
    """

    id: str = ""
    role: Role
    parts: list[UIMessagePart] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = None

    model_config = {"frozen": True}


# =============================================================================
# Generation Input (tagged variants)
# =============================================================================


class PromptInput(BaseModel):
    """Single-prompt generation input."""

    kind: Literal["prompt"] = "prompt"
    prompt: str

    model_config = {"frozen": True}


class MessagesInput(BaseModel):
    """Conversation generation input: the full ordered message sequence."""

    kind: Literal["messages"] = "messages"
    messages: list[ModelMessage]

    model_config = {"frozen": True}


GenerationInput = Annotated[
    Union[PromptInput, MessagesInput], Field(discriminator="kind")
]
