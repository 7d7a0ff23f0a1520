"""
Provider Base Interface - the upstream text generation port.

This module defines the provider-neutral call parameters built by the
Generation Engine and the abstract client every upstream adapter implements.

Design Pattern:
- Ports and Adapters (Hexagonal Architecture)
- TextGenerationClient serves as the "port" (interface)
- GeminiClient (gemini.py) and FakeTextGenerationClient (fake.py) serve as "adapters"
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from pydantic import BaseModel, Field

from src.models.domain import DEFAULT_TEMPERATURE, ModelMessage


class CallParameters(BaseModel):
    """
    Provider call parameters.

    A prompt input is normalized to a single user message, so adapters only
    ever translate an ordered message list.

    Attributes:
        model: Resolved upstream model identifier.
        messages: Ordered conversation, at least one message.
        system: System instruction text.
        temperature: Sampling temperature.
        max_output_tokens: Maximum output token budget.
    """

    model: str
    messages: list[ModelMessage] = Field(..., min_length=1)
    system: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: Optional[int] = None

    model_config = {"frozen": True}


class TextGenerationClient(ABC):
    """
    Abstract base class for upstream text generation clients.

    Methods:
        complete: Blocking generation returning the final text
        stream: Incremental generation yielding text fragments
        aclose: Release pooled connections

    Example:
        >>> class EchoClient(TextGenerationClient):
        ...     provider_name = "echo"
        ...
        ...     async def complete(self, params: CallParameters) -> str:
        ...         return params.messages[-1].content
        ...
        ...     async def stream(self, params: CallParameters) -> AsyncIterator[str]:
        ...         yield params.messages[-1].content
    """

    provider_name: str = "unknown"

    @abstractmethod
    async def complete(self, params: CallParameters) -> str:
        """
        Generate the full response text in one upstream call.

        Args:
            params: Provider call parameters.

        Returns:
            The generated text.

        Raises:
            ProviderError: If the provider call fails or the reply is malformed.
        """
        ...

    @abstractmethod
    def stream(self, params: CallParameters) -> AsyncIterator[str]:
        """
        Generate the response incrementally.

        Implementations are async generators: nothing is sent upstream until
        the first fragment is requested, so failures surface during
        iteration rather than when the iterator is created.

        Args:
            params: Provider call parameters.

        Yields:
            Non-empty text fragments in production order.

        Raises:
            ProviderError: During iteration, if the provider call fails.
        """
        ...

    async def aclose(self) -> None:
        """Release any pooled resources held by the client."""
        return None
