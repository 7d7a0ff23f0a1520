"""
Providers Package - upstream model provider access.

- base: TextGenerationClient interface and CallParameters
- gemini: Google Gemini REST client (httpx)
- binding: ProviderBinding, the process-wide Uninitialized | Ready state
- ui_stream: UI message stream encoding for conversational clients
- fake: scripted client for tests and local development
"""

from src.providers.base import CallParameters, TextGenerationClient
from src.providers.binding import ProviderBinding, ProviderHandle, Ready, Uninitialized
from src.providers.fake import FakeTextGenerationClient
from src.providers.gemini import GeminiClient
from src.providers.ui_stream import UIMessageStreamHandle

__all__ = [
    "CallParameters",
    "TextGenerationClient",
    "GeminiClient",
    "FakeTextGenerationClient",
    "ProviderBinding",
    "ProviderHandle",
    "Ready",
    "Uninitialized",
    "UIMessageStreamHandle",
]
