"""
Fake Text Generation Client - Test Double Implementation

This module provides a FakeTextGenerationClient that implements the real
TextGenerationClient interface without making network calls.

This is NOT mocking - it's a proper implementation of the interface for testing.
It can also serve local development and demo environments without API keys.
"""

import asyncio
from typing import AsyncIterator, Sequence

from src.providers.base import CallParameters, TextGenerationClient


class FakeTextGenerationClient(TextGenerationClient):
    """
    Fake upstream client with scripted output.

    Attributes:
        response_text: Text returned by complete().
        fragments: Fragments yielded by stream().
        error: Optional exception raised by complete(), or by stream() after
            `fail_after` fragments.
        fail_after: Number of fragments streamed before `error` is raised.
        calls: Call parameters received, in order.
        stream_started: Number of streams that began iterating.
        stream_closed: Number of streams whose generator was finalized.

    Example:
        >>> client = FakeTextGenerationClient(fragments=["he", "llo"])
        >>> [f async for f in client.stream(params)]
        ['he', 'llo']

        # For error testing:
        >>> client = FakeTextGenerationClient(
        ...     fragments=["a", "b"], error=ProviderError("boom", provider="fake"), fail_after=1
        ... )
    """

    provider_name = "fake"

    def __init__(
        self,
        response_text: str = "Fake response for testing",
        fragments: Sequence[str] = ("Fake ", "response"),
        error: Exception | None = None,
        fail_after: int | None = None,
        delay: float = 0.0,
    ) -> None:
        self.response_text = response_text
        self.fragments = list(fragments)
        self.error = error
        self.fail_after = fail_after
        self.delay = delay
        self.calls: list[CallParameters] = []
        self.stream_started = 0
        self.stream_closed = 0
        self.closed = False

    async def complete(self, params: CallParameters) -> str:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.response_text

    async def stream(self, params: CallParameters) -> AsyncIterator[str]:
        self.calls.append(params)
        self.stream_started += 1
        try:
            for index, fragment in enumerate(self.fragments):
                if self.error is not None and self.fail_after == index:
                    raise self.error
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield fragment
            if self.error is not None and (self.fail_after is None or self.fail_after >= len(self.fragments)):
                raise self.error
        finally:
            self.stream_closed += 1

    async def aclose(self) -> None:
        self.closed = True
