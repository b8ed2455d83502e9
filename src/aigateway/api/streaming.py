"""Server-Sent Events bridge for streaming completions.

Turns an adapter's lazy :class:`~aigateway.providers.StreamChunk` sequence into
SSE frames:

* one ``data: {"content": ..., "done": ...}`` event per chunk
* ``data: [DONE]`` once the terminal chunk has been written
* ``data: {"error": ...}`` instead, if the sequence raises; nothing follows it

The upstream iterator is closed on every exit path, including a client
disconnect (Starlette cancels the generator), so no further chunks are pulled
once the response is finished.  Mid-stream failures are never retried.
"""

import json
import time
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing
from typing import Any

import structlog
from fastapi.responses import StreamingResponse

from aigateway.providers import GatewayError, StreamChunk
from aigateway.telemetry import record_llm_call

_log = structlog.get_logger(__name__)

DONE_EVENT = "data: [DONE]\n\n"

SSE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_event(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


class StreamingBridge:
    """Consume one chunk sequence and emit SSE frames for it.

    After :meth:`events` finishes, :attr:`outcome` is ``"completed"``,
    ``"error"`` or ``"cancelled"`` and :attr:`chunks_written` counts the chunk
    events sent (the ``[DONE]`` sentinel and error events are not counted).
    """

    def __init__(self, chunks: AsyncIterator[StreamChunk]) -> None:
        self._chunks = chunks
        self.outcome: str | None = None
        self.error: str | None = None
        self.error_type: str | None = None
        self.chunks_written = 0

    async def events(self) -> AsyncGenerator[str, None]:
        try:
            async for chunk in self._chunks:
                yield format_event(chunk.to_dict())
                self.chunks_written += 1
                if chunk.done:
                    break
            yield DONE_EVENT
            self.outcome = "completed"
        except GatewayError as exc:
            self.outcome = "error"
            self.error = exc.message
            self.error_type = type(exc).__name__
            yield format_event({"error": exc.message})
        except Exception as exc:
            self.outcome = "error"
            self.error = str(exc)
            self.error_type = type(exc).__name__
            yield format_event({"error": str(exc)})
        finally:
            if self.outcome is None:
                self.outcome = "cancelled"
            aclose = getattr(self._chunks, "aclose", None)
            if aclose is not None:
                await aclose()


async def _observed(
    bridge: StreamingBridge,
    provider: str,
    log: Any,
    start_time: float,
) -> AsyncGenerator[str, None]:
    try:
        async with aclosing(bridge.events()) as events:
            async for event in events:
                yield event
    finally:
        duration = time.monotonic() - start_time
        if bridge.outcome == "error":
            log.error(
                "completion_stream_error",
                error_type=bridge.error_type,
                error=bridge.error,
                chunks=bridge.chunks_written,
            )
        log.info(
            "completion_stream_complete",
            outcome=bridge.outcome,
            chunks=bridge.chunks_written,
            duration_ms=round(duration * 1000, 2),
        )
        record_llm_call(provider, "stream", bridge.outcome or "cancelled", duration)


def stream_response(
    chunks: AsyncIterator[StreamChunk],
    provider: str,
    model: str | None = None,
    log: Any = None,
    start_time: float | None = None,
    headers: dict[str, str] | None = None,
) -> StreamingResponse:
    """Wrap *chunks* in a ``text/event-stream`` response."""
    bridge = StreamingBridge(chunks)
    return StreamingResponse(
        _observed(
            bridge,
            provider,
            (log if log is not None else _log).bind(provider=provider, model=model),
            start_time if start_time is not None else time.monotonic(),
        ),
        media_type="text/event-stream",
        headers={**SSE_HEADERS, **(headers or {})},
    )
