"""
Response Models - JSON envelopes and SSE frame payloads.

The complete-text path answers with {"data": {"text": ...}}; the token
stream path frames each fragment as {"text": ...} and reports an in-stream
failure as {"error": "Stream error"}.
"""

from pydantic import BaseModel


class TextData(BaseModel):
    """Inner payload of the complete-text envelope."""

    text: str


class CompleteTextResponse(BaseModel):
    """
    Complete-text response envelope.

    Example:
        >>> CompleteTextResponse(data=TextData(text="4")).model_dump()
        {'data': {'text': '4'}}
    """

    data: TextData


class TextFragmentEvent(BaseModel):
    """One SSE event of the token stream."""

    text: str


class StreamErrorEvent(BaseModel):
    """Terminal SSE event emitted when the upstream fails mid-stream."""

    error: str = "Stream error"


class ErrorDetail(BaseModel):
    """Error details carried in the error envelope."""

    message: str
    code: str
    type: str


class ErrorResponse(BaseModel):
    """Error envelope returned for rejected requests."""

    error: ErrorDetail
