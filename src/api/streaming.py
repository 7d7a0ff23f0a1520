"""
Response Adapter - engine results to HTTP responses.

Three shapes:

- complete_text_response(): JSON envelope {"data": {"text": ...}}
- SSEStreamAdapter + sse_response(): token stream as Server-Sent Events

      data: {"text": "Hel"}
      data: {"text": "lo"}
      data: [DONE]

  or, when the upstream fails after N fragments, the N fragment frames
  followed by exactly one `data: {"error": "Stream error"}` frame.
- ui_message_stream_response(): UI message stream passthrough; the body is
  forwarded byte for byte as the provider layer produces it.

Streaming State Machine:
    IDLE -> STREAMING     (first fragment received)
    IDLE | STREAMING -> COMPLETED   ([DONE] sent)
                     -> FAILED      (error frame sent)
                     -> CANCELLED   (client disconnected, nothing more sent)

At most one terminal frame is written and nothing follows it. Once the
first byte has been sent the status code cannot change, so upstream errors
are reported in-band and never re-raised.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, AsyncIterator

from fastapi.responses import JSONResponse, StreamingResponse

from src.core.channel import DEFAULT_MAXSIZE, FragmentChannel
from src.models.responses import (
    CompleteTextResponse,
    StreamErrorEvent,
    TextData,
    TextFragmentEvent,
)
from src.observability.metrics import record_generation, record_stream_fragment
from src.providers.ui_stream import ClosingStreamingResponse, UIMessageStreamHandle


logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_event(payload: dict[str, Any]) -> str:
    """Frame a JSON payload as one SSE event."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


DONE_FRAME = "data: [DONE]\n\n"
ERROR_FRAME = format_sse_event(StreamErrorEvent().model_dump())


# =============================================================================
# Complete Text
# =============================================================================


def complete_text_response(text: str) -> JSONResponse:
    """Wrap generated text in the complete-text envelope."""
    body = CompleteTextResponse(data=TextData(text=text))
    return JSONResponse(status_code=200, content=body.model_dump())


# =============================================================================
# Token Stream
# =============================================================================


class StreamState(str, Enum):
    """Lifecycle of one token stream."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({StreamState.COMPLETED, StreamState.FAILED, StreamState.CANCELLED})


class SSEStreamAdapter:
    """
    Converts a fragment iterator into SSE frames.

    Fragments are pulled through a FragmentChannel so the upstream read runs
    in its own task, at most `buffer_size` fragments ahead of the client. A
    client disconnect cancels that task and closes the upstream iterator.

    Args:
        fragments: Lazy upstream fragment iterator.
        buffer_size: Fragments buffered ahead of the client.
        operation: Metrics label.

    Example:
        >>> adapter = SSEStreamAdapter(engine.generate_stream("Hi"))
        >>> return sse_response(adapter)
    """

    def __init__(
        self,
        fragments: AsyncIterator[str],
        buffer_size: int = DEFAULT_MAXSIZE,
        operation: str = "stream",
    ) -> None:
        self._fragments = fragments
        self._buffer_size = buffer_size
        self._operation = operation
        self._state = StreamState.IDLE
        self._started = False
        self._fragment_count = 0

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def fragment_count(self) -> int:
        return self._fragment_count

    async def frames(self) -> AsyncIterator[str]:
        """
        Yield SSE frames in fragment order, then one terminal frame.

        Single use: a second call yields nothing.
        """
        if self._started:
            return
        self._started = True

        try:
            async with FragmentChannel(self._fragments, self._buffer_size) as channel:
                try:
                    async for fragment in channel:
                        if self._state is StreamState.IDLE:
                            self._state = StreamState.STREAMING
                        self._fragment_count += 1
                        record_stream_fragment(self._operation)
                        yield format_sse_event(TextFragmentEvent(text=fragment).model_dump())
                except Exception:
                    self._state = StreamState.FAILED
                    logger.exception(
                        "Stream failed after %d fragments: operation=%s",
                        self._fragment_count,
                        self._operation,
                    )
        except (asyncio.CancelledError, GeneratorExit):
            if self._state not in TERMINAL_STATES:
                self._state = StreamState.CANCELLED
                record_generation(self._operation, "cancelled")
            logger.info(
                "Client disconnected, stream cancelled after %d fragments: operation=%s",
                self._fragment_count,
                self._operation,
            )
            raise

        if self._state is StreamState.FAILED:
            record_generation(self._operation, "error")
            yield ERROR_FRAME
            return

        self._state = StreamState.COMPLETED
        record_generation(self._operation, "success")
        yield DONE_FRAME


def sse_response(adapter: SSEStreamAdapter) -> StreamingResponse:
    """Serve a token stream as text/event-stream."""
    return ClosingStreamingResponse(
        adapter.frames(),
        media_type="text/event-stream",
        headers=dict(SSE_HEADERS),
    )


# =============================================================================
# UI Message Stream Passthrough
# =============================================================================


def _record_ui_stream(handle: UIMessageStreamHandle) -> None:
    record_stream_fragment("chat", handle.fragment_count)
    record_generation("chat", handle.outcome or "cancelled")


def ui_message_stream_response(handle: UIMessageStreamHandle) -> StreamingResponse:
    """Forward a UI message stream with its protocol headers."""
    handle.add_done_callback(_record_ui_stream)
    return handle.to_response()
