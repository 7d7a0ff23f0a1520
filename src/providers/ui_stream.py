"""
UI Message Stream - the provider-side streaming handle for conversational clients.

Conversational clients (AI SDK `useChat` and compatible) consume the UI
message stream protocol, version 1: SSE frames whose payloads are JSON
chunks, announced by the `x-vercel-ai-ui-message-stream: v1` header.

    data: {"type":"start","messageId":"msg-..."}
    data: {"type":"start-step"}
    data: {"type":"text-start","id":"txt-0"}
    data: {"type":"text-delta","id":"txt-0","delta":"Hel"}
    data: {"type":"text-delta","id":"txt-0","delta":"lo"}
    data: {"type":"text-end","id":"txt-0"}
    data: {"type":"finish-step"}
    data: {"type":"finish"}
    data: [DONE]

The gateway's Response Adapter forwards these bytes without interpreting
them; this module is the only place that knows the wire format.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, AsyncIterator, Callable, Optional

from fastapi.responses import StreamingResponse

from src.core.channel import DEFAULT_MAXSIZE, FragmentChannel

logger = logging.getLogger(__name__)

UI_MESSAGE_STREAM_VERSION = "v1"

UI_MESSAGE_STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "x-vercel-ai-ui-message-stream": UI_MESSAGE_STREAM_VERSION,
    "X-Accel-Buffering": "no",
}

# Upstream error details are not forwarded to clients.
STREAM_ERROR_TEXT = "An error occurred."


def encode_chunk(chunk: dict[str, Any]) -> bytes:
    """Frame one UI message chunk as an SSE event."""
    return f"data: {json.dumps(chunk, separators=(',', ':'), ensure_ascii=False)}\n\n".encode()


DONE_FRAME = b"data: [DONE]\n\n"


class ClosingStreamingResponse(StreamingResponse):
    """
    StreamingResponse that always finalizes its body iterator.

    When a send fails (ASGI spec 2.4 reports it as ClientDisconnect) Starlette
    stops iterating and leaves the body generator suspended; its cleanup
    would then wait for garbage collection. Closing the iterator when the
    response ends cancels the upstream read right away.
    """

    async def __call__(self, scope: Any, receive: Any, send: Any) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            aclose = getattr(self.body_iterator, "aclose", None)
            if aclose is not None:
                await aclose()


class StreamOutcome:
    """How a UI message stream ended."""

    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


class UIMessageStreamHandle:
    """
    Unmaterialized UI message stream over a fragment iterator.

    The handle is single use: the upstream call is made while the byte
    stream is consumed, and a second consumption yields nothing. Callbacks
    registered with add_done_callback() run once the stream has ended, in
    every outcome, and receive the handle.

    Args:
        fragments: Upstream text fragment iterator.
        message_id: Id announced in the start chunk (generated if omitted).
        buffer_size: Fragments buffered between upstream and transport.

    Attributes:
        outcome: StreamOutcome value once ended, None before.
        fragment_count: Text deltas emitted so far.
    """

    def __init__(
        self,
        fragments: AsyncIterator[str],
        message_id: Optional[str] = None,
        buffer_size: int = DEFAULT_MAXSIZE,
    ) -> None:
        self._fragments = fragments
        self.message_id = message_id or f"msg-{uuid.uuid4().hex[:16]}"
        self._buffer_size = buffer_size
        self._consumed = False
        self._callbacks: list[Callable[["UIMessageStreamHandle"], None]] = []
        self.outcome: Optional[str] = None
        self.fragment_count = 0

    @property
    def consumed(self) -> bool:
        return self._consumed

    def add_done_callback(self, callback: Callable[["UIMessageStreamHandle"], None]) -> None:
        """Register a callback invoked with the handle when the stream ends."""
        self._callbacks.append(callback)

    def _finish(self, outcome: str) -> None:
        self.outcome = outcome
        for callback in self._callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception("UI message stream callback failed: message_id=%s", self.message_id)

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """
        Produce the encoded UI message stream.

        An upstream failure ends the stream with a single error chunk. A
        client disconnect cancels the upstream read and is not an error.
        """
        if self._consumed:
            return
        self._consumed = True

        text_id = "txt-0"
        text_open = False
        failed = False
        outcome = StreamOutcome.CANCELLED

        try:
            yield encode_chunk({"type": "start", "messageId": self.message_id})
            yield encode_chunk({"type": "start-step"})

            try:
                async with FragmentChannel(self._fragments, self._buffer_size) as channel:
                    try:
                        async for fragment in channel:
                            if not text_open:
                                text_open = True
                                yield encode_chunk({"type": "text-start", "id": text_id})
                            self.fragment_count += 1
                            yield encode_chunk(
                                {"type": "text-delta", "id": text_id, "delta": fragment}
                            )
                    except Exception:
                        failed = True
                        logger.exception("UI message stream failed: message_id=%s", self.message_id)
            except (asyncio.CancelledError, GeneratorExit):
                logger.info(
                    "Client disconnected, UI message stream cancelled: message_id=%s",
                    self.message_id,
                )
                raise

            if failed:
                outcome = StreamOutcome.ERROR
                yield encode_chunk({"type": "error", "errorText": STREAM_ERROR_TEXT})
                return

            if text_open:
                yield encode_chunk({"type": "text-end", "id": text_id})
            yield encode_chunk({"type": "finish-step"})
            yield encode_chunk({"type": "finish"})
            outcome = StreamOutcome.SUCCESS
            yield DONE_FRAME
        finally:
            self._finish(outcome)

    def to_response(self, status_code: int = 200) -> StreamingResponse:
        """Materialize the stream as an HTTP-ready streamed response."""
        return ClosingStreamingResponse(
            self.iter_bytes(),
            status_code=status_code,
            headers=dict(UI_MESSAGE_STREAM_HEADERS),
            media_type="text/event-stream",
        )
