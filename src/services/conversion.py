"""
Message Format Converter - UI messages to model messages.

Reduces the rich, multi-part UI message format kept by conversational
clients to the flat role/content format the provider consumes:

- order and length are preserved (one model message per UI message)
- role is passed through unchanged
- text parts are concatenated in order, without separators
- a message with zero parts becomes a message with empty content

Part types without model content (`step-start`, `reasoning`, `data-*`) are
dropped. Any other non-text part (tool invocations, files, sources) cannot
be reduced here and raises MessageConversionError, which the API reports
as a 400 before the engine is invoked.

The conversion is a coroutine so part types that need further provider
calls to render can be supported without changing callers.
"""

from typing import Sequence

from src.core.exceptions import MessageConversionError
from src.models.domain import ModelMessage, UIMessage, UIMessagePart

TEXT_PART = "text"

IGNORED_PART_TYPES = frozenset({"step-start", "reasoning"})
IGNORED_PART_PREFIXES = ("data-",)


def _is_ignored(part_type: str) -> bool:
    return part_type in IGNORED_PART_TYPES or part_type.startswith(IGNORED_PART_PREFIXES)


def _part_text(part: UIMessagePart, message_index: int) -> str:
    if part.type == TEXT_PART:
        return part.text or ""
    if _is_ignored(part.type):
        return ""
    raise MessageConversionError(part.type, message_index)


def convert_message(message: UIMessage, message_index: int = 0) -> ModelMessage:
    """
    Convert one UI message.

    Args:
        message: The UI message.
        message_index: Position in the conversation (for error reporting).

    Returns:
        ModelMessage with the same role and the concatenated text.

    Raises:
        MessageConversionError: On an unsupported part type.
    """
    content = "".join(_part_text(part, message_index) for part in message.parts)
    return ModelMessage(role=message.role, content=content)


async def to_model_messages(ui_messages: Sequence[UIMessage]) -> list[ModelMessage]:
    """
    Convert an ordered sequence of UI messages to model messages.

    Example:
        >>> await to_model_messages([
        ...     UIMessage(id="1", role="user", parts=[
        ...         UIMessagePart(type="text", text="a"),
        ...         UIMessagePart(type="text", text="b"),
        ...     ])
        ... ])
        [ModelMessage(role='user', content='ab')]
    """
    return [convert_message(message, index) for index, message in enumerate(ui_messages)]
