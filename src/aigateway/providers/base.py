"""Shared adapter contract and the behaviour common to every upstream.

Concrete adapters only translate the canonical request into one SDK call and
pull text/usage back out.  Everything else lives here:

* Model resolution against the adapter's catalog slice
* Request defaults (``max_tokens``, ``temperature``)
* Typed errors: anything that is not already a :class:`GatewayError` is wrapped
  into :class:`ProviderApiError`
* OpenTelemetry spans using GenAI semantic conventions
* Structured logging via structlog (no message bodies are ever logged)
"""

import time
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from typing import Any, ClassVar, Protocol, runtime_checkable

import structlog
from opentelemetry import trace
from opentelemetry.trace import StatusCode

from aigateway.providers.errors import (
    GatewayError,
    ProviderApiError,
    ProviderNotConfiguredError,
)
from aigateway.providers.models import (
    CompletionRequest,
    CompletionResponse,
    Message,
    ModelInfo,
    StreamChunk,
)

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)

DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7


@runtime_checkable
class ProviderAdapter(Protocol):
    """Contract every upstream adapter satisfies.

    Configuration (credential presence) is fixed at construction time for the
    lifetime of the process.
    """

    name: str

    def is_configured(self) -> bool: ...

    def available_models(self) -> list[ModelInfo]: ...

    async def complete(self, request: CompletionRequest) -> CompletionResponse: ...

    def stream(self, request: CompletionRequest) -> AsyncIterator[StreamChunk]: ...


def split_system(messages: Sequence[Message]) -> tuple[str | None, list[Message]]:
    """Separate system instructions from the conversation turns.

    Multiple system messages are joined with a blank line, in order.
    """
    system_parts = [m.content for m in messages if m.role == "system"]
    turns = [m for m in messages if m.role != "system"]
    system = "\n\n".join(system_parts) if system_parts else None
    return system, turns


class BaseProviderAdapter(ABC):
    """Template for one upstream provider.

    Subclasses set :attr:`name` and :attr:`models` and implement
    :meth:`_create_client`, :meth:`_complete` and :meth:`_stream_text`.

    Args:
        api_key: Provider credential.  ``None`` or empty leaves the adapter
            permanently unconfigured; no SDK client is created.
        timeout: Per-request timeout in seconds handed to the SDK client.
    """

    name: ClassVar[str]
    models: ClassVar[tuple[ModelInfo, ...]]

    def __init__(self, api_key: str | None = None, timeout: float = 60) -> None:
        self._timeout = timeout
        self._client: Any = self._create_client(api_key, timeout) if api_key else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_configured(self) -> bool:
        return self._client is not None

    def available_models(self) -> list[ModelInfo]:
        return list(self.models)

    def supports_model(self, model_id: str) -> bool:
        return any(m.id == model_id for m in self.models)

    def resolve_model(self, requested: str | None) -> str:
        """Return *requested* when it is in this adapter's catalog, else the default."""
        if requested and self.supports_model(requested):
            return requested
        return self.models[0].id

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run one non-streaming completion against the upstream.

        The upstream is called exactly once; there is no internal retry.

        Raises:
            ProviderNotConfiguredError: The adapter has no credential.
            InvalidConversationShapeError: The conversation violates an
                upstream structural rule.
            EmptyCompletionError: The upstream returned no text.
            ProviderApiError: Any transport or upstream failure.
        """
        model = self.resolve_model(request.model)
        self._ensure_configured(model)
        max_tokens, temperature = self._resolve_params(request)

        log = _log.bind(provider=self.name, model=model, stream=False)
        start_time = time.monotonic()

        with _tracer.start_as_current_span("llm.complete") as span:
            self._set_request_attributes(span, model, max_tokens, temperature, stream=False)
            log.info("llm_request_start", message_count=len(request.messages))

            try:
                self._validate(request)
                response = await self._complete(request, model, max_tokens, temperature)
            except GatewayError as exc:
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, exc.message)
                log.error("llm_request_error", error_type=type(exc).__name__, error=exc.message)
                raise
            except Exception as exc:
                mapped = self._map_error(exc, model)
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, str(exc))
                log.error("llm_request_error", error_type=type(exc).__name__, error=str(exc))
                raise mapped from exc
            finally:
                duration_ms = round((time.monotonic() - start_time) * 1000, 2)
                log.info("llm_request_complete", duration_ms=duration_ms)

            if response.usage is not None:
                span.set_attribute("gen_ai.usage.input_tokens", response.usage.prompt_tokens)
                span.set_attribute("gen_ai.usage.output_tokens", response.usage.completion_tokens)
            if response.finish_reason:
                span.set_attribute("gen_ai.response.finish_reasons", response.finish_reason)

            return response

    def stream(self, request: CompletionRequest) -> AsyncGenerator[StreamChunk, None]:
        """Return a lazy sequence yielding the completion incrementally.

        Configuration and conversation shape are checked here, before the
        sequence is returned, so those errors raise at call time rather than
        on the first read.  The sequence yields one :class:`StreamChunk` per
        upstream delta, then exactly one terminal chunk with ``done=True``.
        Failures, including mid-stream ones, are raised to the consumer as
        typed errors and never retried.

        Raises:
            ProviderNotConfiguredError: The adapter has no credential.
            InvalidConversationShapeError: The conversation violates an
                upstream structural rule.
        """
        model = self.resolve_model(request.model)
        self._ensure_configured(model)
        try:
            self._validate(request)
        except GatewayError as exc:
            _log.error(
                "llm_stream_rejected",
                provider=self.name,
                model=model,
                error_type=type(exc).__name__,
                error=exc.message,
            )
            raise
        return self._stream_chunks(request, model)

    async def _stream_chunks(
        self, request: CompletionRequest, model: str
    ) -> AsyncGenerator[StreamChunk, None]:
        max_tokens, temperature = self._resolve_params(request)

        log = _log.bind(provider=self.name, model=model, stream=True)
        start_time = time.monotonic()
        chunk_count = 0

        with _tracer.start_as_current_span("llm.stream") as span:
            self._set_request_attributes(span, model, max_tokens, temperature, stream=True)
            log.info("llm_request_start", message_count=len(request.messages))

            try:
                async for text in self._stream_text(request, model, max_tokens, temperature):
                    if text:
                        chunk_count += 1
                        yield StreamChunk(content=text, done=False)
                yield StreamChunk(content="", done=True)
            except GatewayError as exc:
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, exc.message)
                log.error(
                    "llm_stream_error",
                    error_type=type(exc).__name__,
                    error=exc.message,
                    chunks_sent=chunk_count,
                )
                raise
            except Exception as exc:
                mapped = self._map_error(exc, model)
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, str(exc))
                log.error(
                    "llm_stream_error",
                    error_type=type(exc).__name__,
                    error=str(exc),
                    chunks_sent=chunk_count,
                )
                raise mapped from exc
            finally:
                span.set_attribute("llm.stream.chunks", chunk_count)
                duration_ms = round((time.monotonic() - start_time) * 1000, 2)
                log.info("llm_request_complete", duration_ms=duration_ms, chunks=chunk_count)

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _create_client(self, api_key: str, timeout: float) -> Any:
        """Build the SDK client.  Only called when a credential is present."""

    @abstractmethod
    async def _complete(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> CompletionResponse: ...

    @abstractmethod
    def _stream_text(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]: ...

    def _validate(self, request: CompletionRequest) -> None:
        """Check upstream-specific structural rules before dispatch."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_configured(self, model: str) -> None:
        if not self.is_configured():
            raise ProviderNotConfiguredError(
                f"Provider {self.name} is not configured",
                provider=self.name,
                model=model,
            )

    def _resolve_params(self, request: CompletionRequest) -> tuple[int, float]:
        max_tokens = request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS
        temperature = (
            request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
        )
        return max_tokens, temperature

    def _set_request_attributes(
        self,
        span: trace.Span,
        model: str,
        max_tokens: int,
        temperature: float,
        stream: bool,
    ) -> None:
        span.set_attribute("gen_ai.system", self.name)
        span.set_attribute("gen_ai.request.model", model)
        span.set_attribute("gen_ai.request.max_tokens", max_tokens)
        span.set_attribute("gen_ai.request.temperature", temperature)
        span.set_attribute("llm.stream", stream)

    def _map_error(self, error: Exception, model: str) -> ProviderApiError:
        """Wrap an SDK or transport exception, keeping only its message."""
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        return ProviderApiError(
            message=f"{self.name} API error: {message}",
            provider=self.name,
            model=model,
        )
