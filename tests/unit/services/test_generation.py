"""
Unit tests for src/services/generation.py - GenerationEngine.
"""

import json

import pytest

from src.core.exceptions import ProviderError, ProviderNotInitializedError
from src.models.domain import (
    GenerationOptions,
    MessagesInput,
    ModelIdentifier,
    ModelMessage,
    PromptInput,
)
from src.providers.ui_stream import UIMessageStreamHandle
from src.services.generation import GenerationEngine, build_call_parameters


class TestBuildCallParameters:
    """Input variants to provider call parameters."""

    def test_prompt_becomes_single_user_message(self):
        params = build_call_parameters(
            PromptInput(prompt="What is 2 + 2?"), ModelIdentifier.GEMINI_2_0_FLASH
        )

        assert params.model == "gemini-2.0-flash"
        assert params.messages == [ModelMessage(role="user", content="What is 2 + 2?")]
        assert params.temperature == 0.7
        assert params.system is None

    def test_messages_passed_in_order(self):
        messages = [
            ModelMessage(role="user", content="Hi"),
            ModelMessage(role="assistant", content="Hello"),
            ModelMessage(role="user", content="Bye"),
        ]

        params = build_call_parameters(
            MessagesInput(messages=messages), ModelIdentifier.GEMINI_1_5_PRO
        )

        assert params.messages == messages
        assert params.model == "gemini-1.5-pro"

    def test_options_merged(self):
        options = GenerationOptions(system="Be terse.", temperature=0.1, max_output_tokens=64)

        params = build_call_parameters(
            PromptInput(prompt="Hi"), ModelIdentifier.GEMINI_2_0_FLASH, options
        )

        assert params.system == "Be terse."
        assert params.temperature == 0.1
        assert params.max_output_tokens == 64

    def test_unknown_input_rejected(self):
        with pytest.raises(TypeError):
            build_call_parameters("Hi", ModelIdentifier.GEMINI_2_0_FLASH)


class TestGenerateComplete:
    @pytest.mark.asyncio
    async def test_returns_text(self, fake_binding, fake_client):
        engine = GenerationEngine(fake_binding)

        text = await engine.generate_complete("What is 2 + 2?")

        assert text == "4"
        assert fake_client.calls[0].messages[0].content == "What is 2 + 2?"
        assert fake_client.calls[0].model == "gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(self, fake_binding, fake_client):
        fake_client.error = ProviderError("upstream down", provider="gemini")

        with pytest.raises(ProviderError):
            await GenerationEngine(fake_binding).generate_complete("Hi")

    @pytest.mark.asyncio
    async def test_unready_fails_before_any_call(self, unready_binding):
        with pytest.raises(ProviderNotInitializedError):
            await GenerationEngine(unready_binding).generate_complete("Hi")


class TestGenerateStream:
    @pytest.mark.asyncio
    async def test_yields_fragments_in_order(self, fake_binding):
        fragments = GenerationEngine(fake_binding).generate_stream("Hi")

        assert [f async for f in fragments] == ["Hel", "lo", "!"]

    def test_returns_before_upstream_call(self, fake_binding, fake_client):
        GenerationEngine(fake_binding).generate_stream("Hi")

        assert fake_client.stream_started == 0

    @pytest.mark.asyncio
    async def test_failure_surfaces_during_iteration(self, fake_binding, fake_client):
        fake_client.error = ProviderError("reset", provider="gemini")
        fake_client.fail_after = 1
        fragments = GenerationEngine(fake_binding).generate_stream("Hi")
        received = []

        with pytest.raises(ProviderError):
            async for fragment in fragments:
                received.append(fragment)

        assert received == ["Hel"]

    def test_unready_raises_immediately(self, unready_binding):
        with pytest.raises(ProviderNotInitializedError):
            GenerationEngine(unready_binding).generate_stream("Hi")


class TestGenerateRaw:
    @pytest.mark.asyncio
    async def test_returns_unconsumed_handle(self, fake_binding, fake_client):
        handle = GenerationEngine(fake_binding, buffer_size=2).generate_raw(
            MessagesInput(messages=[ModelMessage(role="user", content="Hello!")]),
            GenerationOptions(system="Be friendly."),
        )

        assert isinstance(handle, UIMessageStreamHandle)
        assert handle.consumed is False
        assert fake_client.stream_started == 0

        frames = [frame async for frame in handle.iter_bytes()]

        deltas = [
            json.loads(frame.decode()[6:])["delta"]
            for frame in frames
            if b'"text-delta"' in frame
        ]
        assert "".join(deltas) == "Hello!"
        assert fake_client.calls[0].system == "Be friendly."

    def test_prompt_input_accepted(self, fake_binding):
        handle = GenerationEngine(fake_binding).generate_raw(PromptInput(prompt="Hi"))

        assert isinstance(handle, UIMessageStreamHandle)

    def test_unready_raises(self, unready_binding):
        with pytest.raises(ProviderNotInitializedError):
            GenerationEngine(unready_binding).generate_raw(PromptInput(prompt="Hi"))
