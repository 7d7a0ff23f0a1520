"""
Generation Engine - the three upstream call shapes.

The engine turns a generation input plus options into provider call
parameters and invokes the bound client, returning one of three result
shapes:

- generate_complete(): the materialized text
- generate_stream():   a lazy async iterator of text fragments
- generate_raw():      an unmaterialized UIMessageStreamHandle

Three methods rather than one polymorphic call: each caller needs a
structurally different return type.

Every operation asks the ProviderBinding for its handle first, so an
unready binding fails with ProviderNotInitializedError before any network
call is attempted. No retries are performed.
"""

import logging
from typing import AsyncIterator, Optional

from src.core.channel import DEFAULT_MAXSIZE
from src.models.domain import (
    GenerationInput,
    GenerationOptions,
    MessagesInput,
    ModelIdentifier,
    ModelMessage,
    PromptInput,
)
from src.providers.base import CallParameters
from src.providers.binding import ProviderBinding
from src.providers.ui_stream import UIMessageStreamHandle

logger = logging.getLogger(__name__)


def build_call_parameters(
    generation_input: GenerationInput,
    model: ModelIdentifier,
    options: Optional[GenerationOptions] = None,
) -> CallParameters:
    """
    Build provider call parameters by branching on the input tag.

    Args:
        generation_input: PromptInput or MessagesInput.
        model: Resolved model identifier.
        options: Generation options (defaults apply when omitted).

    Returns:
        CallParameters with the prompt normalized to a single user message
        or the full ordered message sequence.

    Raises:
        TypeError: If the input is neither variant.
    """
    options = options or GenerationOptions()

    if isinstance(generation_input, PromptInput):
        messages = [ModelMessage(role="user", content=generation_input.prompt)]
    elif isinstance(generation_input, MessagesInput):
        messages = list(generation_input.messages)
    else:
        raise TypeError(f"Unsupported generation input: {type(generation_input).__name__}")

    return CallParameters(
        model=model.value,
        messages=messages,
        system=options.system,
        temperature=options.temperature,
        max_output_tokens=options.max_output_tokens,
    )


class GenerationEngine:
    """
    Invokes the bound provider in blocking, incremental or UI-stream mode.

    Args:
        binding: The process-wide ProviderBinding.
        buffer_size: Fragments buffered by UI message stream handles.

    Example:
        >>> engine = GenerationEngine(binding)
        >>> text = await engine.generate_complete("What is 2 + 2?")
        >>> async for fragment in engine.generate_stream("Tell me a story"):
        ...     print(fragment, end="")
    """

    def __init__(self, binding: ProviderBinding, buffer_size: int = DEFAULT_MAXSIZE) -> None:
        self._binding = binding
        self._buffer_size = buffer_size

    async def generate_complete(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        """
        Generate the full reply to a prompt.

        Raises:
            ProviderNotInitializedError: If the binding is not ready.
            ProviderError: If the upstream call fails.
        """
        handle = self._binding.handle()
        params = build_call_parameters(PromptInput(prompt=prompt), handle.model, options)
        logger.debug("generate_complete: model=%s", params.model)
        return await handle.client.complete(params)

    def generate_stream(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> AsyncIterator[str]:
        """
        Start an incremental generation.

        Returns immediately; the upstream request is made while the
        returned iterator is consumed, so upstream failures surface during
        iteration. The iterator is finite and cannot be restarted.

        Raises:
            ProviderNotInitializedError: If the binding is not ready.
        """
        handle = self._binding.handle()
        params = build_call_parameters(PromptInput(prompt=prompt), handle.model, options)
        logger.debug("generate_stream: model=%s", params.model)
        return handle.client.stream(params)

    def generate_raw(
        self,
        generation_input: GenerationInput,
        options: Optional[GenerationOptions] = None,
    ) -> UIMessageStreamHandle:
        """
        Start a generation delivered as a UI message stream.

        Only parameter validity is guaranteed at return time, not upstream
        success: failures are reported inside the stream.

        Raises:
            ProviderNotInitializedError: If the binding is not ready.
        """
        handle = self._binding.handle()
        params = build_call_parameters(generation_input, handle.model, options)
        logger.debug(
            "generate_raw: model=%s kind=%s messages=%d",
            params.model,
            generation_input.kind,
            len(params.messages),
        )
        return UIMessageStreamHandle(handle.client.stream(params), buffer_size=self._buffer_size)
