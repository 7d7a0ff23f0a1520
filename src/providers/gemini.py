"""
Gemini Client - Google Generative AI REST adapter.

This module implements the TextGenerationClient port against the Gemini
REST API using httpx:

- complete(): POST {base}/models/{model}:generateContent
- stream():   POST {base}/models/{model}:streamGenerateContent?alt=sse

The credential travels in the x-goog-api-key header so it never appears in
URLs or access logs. No retries are performed here: upstream failures are
classified and raised once.

Reference:
- Google Generative AI API Docs: https://ai.google.dev/api
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from src.core.exceptions import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
)
from src.models.domain import ModelMessage
from src.providers.base import CallParameters, TextGenerationClient

logger = logging.getLogger(__name__)

# Default API base URL
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

PROVIDER_NAME = "gemini"


class GeminiClient(TextGenerationClient):
    """
    Google Gemini client.

    Args:
        api_key: Google AI API key.
        base_url: Alternate API base URL (default: generativelanguage.googleapis.com).
        timeout: Transport timeout in seconds.
        http_client: Pre-built httpx.AsyncClient (tests inject a MockTransport here).

    Example:
        >>> client = GeminiClient(api_key="AIza...")
        >>> text = await client.complete(params)
    """

    provider_name = PROVIDER_NAME

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_base = (base_url or GEMINI_API_BASE).rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0)
        )

    @property
    def api_base(self) -> str:
        """Base URL requests are sent to."""
        return self._api_base

    async def aclose(self) -> None:
        """Close the pooled HTTP client."""
        await self._client.aclose()

    # =========================================================================
    # complete() method
    # =========================================================================

    async def complete(self, params: CallParameters) -> str:
        """
        Generate the full response text.

        Args:
            params: Provider call parameters.

        Returns:
            Concatenated text of the first candidate.

        Raises:
            AuthenticationError: On 401/403.
            RateLimitError: On 429.
            ProviderError: On other errors or a reply without candidates.
        """
        url = f"{self._api_base}/models/{params.model}:generateContent"

        try:
            response = await self._client.post(
                url, json=self.build_payload(params), headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Gemini request failed: {e}", provider=PROVIDER_NAME
            ) from e

        if response.status_code != 200:
            self._handle_error_response(
                response.status_code, response.text, response.headers
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                "Gemini returned a non-JSON response", provider=PROVIDER_NAME
            ) from e

        try:
            candidates = data.get("candidates")
            if not candidates:
                raise ProviderError(
                    f"Gemini returned no candidates: {self._block_reason(data)}",
                    provider=PROVIDER_NAME,
                )
            return self.extract_text(candidates)
        except (AttributeError, TypeError, KeyError) as e:
            raise ProviderError(
                f"Gemini returned a malformed response: {e}", provider=PROVIDER_NAME
            ) from e

    # =========================================================================
    # stream() method
    # =========================================================================

    async def stream(self, params: CallParameters) -> AsyncIterator[str]:
        """
        Generate the response incrementally over SSE.

        Args:
            params: Provider call parameters.

        Yields:
            Non-empty text fragments.

        Raises:
            AuthenticationError: On 401/403.
            RateLimitError: On 429.
            ProviderError: On transport failures or an in-stream error object.
        """
        url = f"{self._api_base}/models/{params.model}:streamGenerateContent"
        payload = self.build_payload(params)

        try:
            async with self._client.stream(
                "POST",
                url,
                params={"alt": "sse"},
                json=payload,
                headers=self._headers(),
            ) as response:
                if response.status_code != 200:
                    error_text = await response.aread()
                    self._handle_error_response(
                        response.status_code,
                        error_text.decode(errors="replace"),
                        response.headers,
                    )

                async for line in response.aiter_lines():
                    text = self._process_stream_line(line)
                    if text:
                        yield text
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Gemini stream failed: {e}", provider=PROVIDER_NAME
            ) from e

    def _process_stream_line(self, line: str) -> str | None:
        """
        Process a single SSE line from the stream.

        Returns:
            Text carried by the line, or None for blank/comment/empty lines.

        Raises:
            ProviderError: If the line carries an upstream error object.
        """
        if not line or not line.startswith("data:"):
            return None

        data_str = line[5:].strip()
        if not data_str or data_str == "[DONE]":
            return None

        try:
            chunk_data = json.loads(data_str)
        except json.JSONDecodeError:
            logger.warning("Failed to parse streaming chunk: %s", data_str[:100])
            return None

        if not isinstance(chunk_data, dict):
            raise ProviderError(
                "Gemini stream returned a malformed chunk", provider=PROVIDER_NAME
            )

        error = chunk_data.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ProviderError(
                f"Gemini stream error: {message}", provider=PROVIDER_NAME
            )

        try:
            return self.extract_text(chunk_data.get("candidates", []))
        except (AttributeError, TypeError, KeyError) as e:
            raise ProviderError(
                f"Gemini stream returned a malformed chunk: {e}", provider=PROVIDER_NAME
            ) from e

    # =========================================================================
    # Payload Translation
    # =========================================================================

    def build_payload(self, params: CallParameters) -> dict[str, Any]:
        """
        Build the Gemini request body from call parameters.

        Flat format:
            [{"role": "user", "content": "Hello"}, {"role": "assistant", "content": "Hi"}]

        Gemini format:
            [{"role": "user", "parts": [{"text": "Hello"}]},
             {"role": "model", "parts": [{"text": "Hi"}]}]

        System-role messages are lifted into systemInstruction after the
        explicit system text.

        Args:
            params: Provider call parameters.

        Returns:
            Dict payload for the API call.
        """
        contents: list[dict[str, Any]] = []
        system_texts: list[str] = [params.system] if params.system else []

        for msg in params.messages:
            if msg.role == "system":
                text = self._content_text(msg)
                if text:
                    system_texts.append(text)
                continue
            contents.append(
                {
                    "role": "model" if msg.role == "assistant" else "user",
                    "parts": self._build_content_parts(msg),
                }
            )

        payload: dict[str, Any] = {"contents": contents}

        if system_texts:
            payload["systemInstruction"] = {
                "parts": [{"text": "\n\n".join(system_texts)}]
            }

        gen_config: dict[str, Any] = {"temperature": params.temperature}
        if params.max_output_tokens is not None:
            gen_config["maxOutputTokens"] = params.max_output_tokens
        payload["generationConfig"] = gen_config

        return payload

    def _build_content_parts(self, msg: ModelMessage) -> list[dict[str, Any]]:
        """Build Gemini parts from message content; never empty."""
        if isinstance(msg.content, str):
            return [{"text": msg.content}]

        parts = [
            {"text": item.get("text", "")}
            for item in msg.content
            if item.get("type") == "text"
        ]
        return parts or [{"text": ""}]

    def _content_text(self, msg: ModelMessage) -> str:
        """Flatten message content to plain text."""
        return "".join(part["text"] for part in self._build_content_parts(msg))

    # =========================================================================
    # Response Parsing
    # =========================================================================

    @staticmethod
    def extract_text(candidates: list[dict[str, Any]]) -> str:
        """
        Extract text from the first candidate, skipping thought parts.

        Args:
            candidates: Gemini candidates array.

        Returns:
            Concatenated text (empty if the candidate has no text parts).
        """
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(
            part.get("text", "")
            for part in parts
            if isinstance(part, dict) and not part.get("thought")
        )

    @staticmethod
    def _block_reason(data: dict[str, Any]) -> str:
        feedback = data.get("promptFeedback") or {}
        return feedback.get("blockReason", "empty response")

    # =========================================================================
    # Error Classification
    # =========================================================================

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

    @staticmethod
    def _retry_after(headers: httpx.Headers | None) -> int | None:
        """Seconds from a numeric Retry-After header, else None."""
        value = (headers or {}).get("retry-after", "").strip()
        return int(value) if value.isdigit() else None

    def _handle_error_response(
        self,
        status_code: int,
        error_text: str,
        headers: httpx.Headers | None = None,
    ) -> None:
        """
        Handle HTTP error responses from the Gemini API.

        Args:
            status_code: HTTP status code.
            error_text: Error response body.
            headers: Response headers (Retry-After on 429).

        Raises:
            AuthenticationError: For 401/403 errors.
            RateLimitError: For 429 errors.
            ProviderError: For other errors.
        """
        if status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {error_text}",
                provider=PROVIDER_NAME,
                status_code=status_code,
            )

        if status_code == 429:
            raise RateLimitError(
                f"Rate limit exceeded: {error_text}",
                provider=PROVIDER_NAME,
                retry_after=self._retry_after(headers),
            )

        raise ProviderError(
            f"Gemini API error ({status_code}): {error_text}",
            provider=PROVIDER_NAME,
            status_code=status_code,
        )
