"""
Provider Binding - the validated, credentialed handle to the upstream provider.

The binding is an explicitly constructed dependency owned by the application
(stored on app.state by src.main) and injected into the Generation Engine and
the Request Gate. Its state is a small sum type:

    Uninitialized  ->  Ready(handle)

It is written once, during the lifespan startup, before any request is
served, and is read-only afterwards; no locking is needed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Union

from src.core.config import Settings
from src.core.exceptions import ProviderNotInitializedError
from src.models.domain import DEFAULT_MODEL, ModelIdentifier, resolve_model
from src.providers.base import TextGenerationClient
from src.providers.gemini import GeminiClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., TextGenerationClient]


@dataclass(frozen=True)
class ProviderHandle:
    """Immutable capability bound to one client (credential) and one model."""

    client: TextGenerationClient
    model: ModelIdentifier


@dataclass(frozen=True)
class Uninitialized:
    """Binding state before a successful initialize()."""


@dataclass(frozen=True)
class Ready:
    """Binding state holding the provider handle."""

    handle: ProviderHandle


BindingState = Union[Uninitialized, Ready]


def _gemini_factory(api_key: str, base_url: str | None, timeout: float) -> TextGenerationClient:
    return GeminiClient(api_key=api_key, base_url=base_url, timeout=timeout)


class ProviderBinding:
    """
    Process-wide binding to the upstream provider.

    Args:
        client_factory: Builds the upstream client from (api_key, base_url,
            timeout). Defaults to GeminiClient; tests pass a fake.

    Example:
        >>> binding = ProviderBinding()
        >>> binding.initialize(Settings(gemini_api_key=""))
        False
        >>> binding.is_ready()
        False
    """

    def __init__(self, client_factory: ClientFactory = _gemini_factory) -> None:
        self._client_factory = client_factory
        self._state: BindingState = Uninitialized()

    @property
    def state(self) -> BindingState:
        return self._state

    def initialize(self, settings: Settings) -> bool:
        """
        Bind the provider from configuration.

        A missing credential is an expected, recoverable runtime state: the
        binding stays unset and False is returned rather than raising. An
        unknown model name falls back to the default. Calling this again
        on a ready binding keeps the existing handle.

        Args:
            settings: Application settings carrying the credential, the
                optional model name and the optional alternate endpoint.

        Returns:
            True when the binding is ready.
        """
        if isinstance(self._state, Ready):
            logger.debug("Provider binding already initialized, keeping existing handle")
            return True

        api_key = settings.gemini_api_key.get_secret_value().strip()
        if not api_key:
            logger.warning("No provider credential configured; generation is disabled")
            return False

        client = self._client_factory(
            api_key=api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.upstream_timeout_seconds,
        )
        model = resolve_model(settings.gemini_model)
        self._state = Ready(ProviderHandle(client=client, model=model))
        logger.info("Provider binding ready: provider=%s model=%s", client.provider_name, model.value)
        return True

    def is_ready(self) -> bool:
        """Return True when a handle is bound. O(1), no side effects."""
        return isinstance(self._state, Ready)

    def current_model(self) -> ModelIdentifier:
        """Resolved model identifier (the default while unready)."""
        if isinstance(self._state, Ready):
            return self._state.handle.model
        return DEFAULT_MODEL

    def handle(self) -> ProviderHandle:
        """
        Get the bound provider handle.

        Raises:
            ProviderNotInitializedError: If the binding is not ready.
        """
        if isinstance(self._state, Ready):
            return self._state.handle
        raise ProviderNotInitializedError()

    async def aclose(self) -> None:
        """Release the upstream client's connections (application shutdown)."""
        if isinstance(self._state, Ready):
            await self._state.handle.client.aclose()
