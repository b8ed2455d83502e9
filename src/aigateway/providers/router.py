"""Provider selection and catalog introspection.

:class:`ProviderRouter` owns the ordered set of adapters and decides which one
serves a request.  Selection order, first match wins:

1. Explicit ``request.provider``: unknown -> :class:`UnknownProviderError`,
   unconfigured -> :class:`ProviderNotConfiguredError`.  Never redirected.
2. ``request.model``: first configured adapter whose catalog lists the id.
3. The configured default provider.
4. The first configured adapter in registration order.
5. Otherwise :class:`NoProviderConfiguredError`.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING

import litellm
import structlog
from pydantic import SecretStr

from aigateway.providers.anthropic_adapter import AnthropicAdapter
from aigateway.providers.base import ProviderAdapter
from aigateway.providers.catalog import DEFAULT_CONTEXT_WINDOW, get_model_info
from aigateway.providers.cost import estimate_cost
from aigateway.providers.errors import (
    NoProviderConfiguredError,
    ProviderNotConfiguredError,
    UnknownProviderError,
)
from aigateway.providers.gemini_adapter import GeminiAdapter
from aigateway.providers.models import (
    CompletionRequest,
    CompletionResponse,
    CostEstimate,
    ModelInfo,
    ProviderStatus,
    StreamChunk,
)
from aigateway.providers.openai_adapter import OpenAIAdapter

if TYPE_CHECKING:
    from aigateway.config import Settings

# LiteLLM is only used for token counting; keep its own logging quiet.
logging.getLogger("LiteLLM").setLevel(logging.WARNING)

_log = structlog.get_logger(__name__)


class ProviderRouter:
    """Routes completion requests to exactly one configured adapter.

    Args:
        adapters: Adapters in registration order.  Names must be unique.
        default_provider: Provider preferred when the caller expresses no
            preference.  Defaults to the first registered adapter.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        default_provider: str | None = None,
    ) -> None:
        names = [a.name for a in adapters]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate adapter names: {names}")
        self._adapters: tuple[ProviderAdapter, ...] = tuple(adapters)
        self._by_name: dict[str, ProviderAdapter] = {a.name: a for a in adapters}
        self._default_provider = default_provider or (names[0] if names else None)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderRouter":
        """Build the three standard adapters from process configuration."""

        def _secret(value: SecretStr | None) -> str | None:
            return value.get_secret_value() if value is not None else None

        adapters: list[ProviderAdapter] = [
            OpenAIAdapter(_secret(settings.openai_api_key), timeout=settings.llm_timeout),
            AnthropicAdapter(_secret(settings.anthropic_api_key), timeout=settings.llm_timeout),
            GeminiAdapter(_secret(settings.gemini_api_key), timeout=settings.llm_timeout),
        ]
        return cls(adapters, default_provider=settings.default_provider)

    @property
    def adapters(self) -> tuple[ProviderAdapter, ...]:
        return self._adapters

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def route(self, request: CompletionRequest) -> ProviderAdapter:
        if request.provider is not None:
            adapter = self._by_name.get(request.provider)
            if adapter is None:
                raise UnknownProviderError(
                    f"Unknown provider: {request.provider}", model=request.model
                )
            if not adapter.is_configured():
                raise ProviderNotConfiguredError(
                    f"Provider {request.provider} is not configured",
                    provider=request.provider,
                    model=request.model,
                )
            return adapter

        if request.model is not None:
            for adapter in self._configured():
                if any(m.id == request.model for m in adapter.available_models()):
                    return adapter

        if self._default_provider is not None:
            default = self._by_name.get(self._default_provider)
            if default is not None and default.is_configured():
                return default

        for adapter in self._configured():
            return adapter

        raise NoProviderConfiguredError("No AI provider is configured", model=request.model)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        adapter = self.route(request)
        _log.debug("provider_selected", provider=adapter.name, model=request.model)
        return await adapter.complete(request)

    def stream(self, request: CompletionRequest) -> tuple[str, AsyncIterator[StreamChunk]]:
        """Route eagerly, then return the provider name and its lazy chunk sequence.

        Routing errors raise here, before any chunk is produced, so the HTTP
        layer can still answer with a proper status code.
        """
        adapter = self.route(request)
        _log.debug("provider_selected", provider=adapter.name, model=request.model, stream=True)
        return adapter.name, adapter.stream(request)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_provider_status(self) -> list[ProviderStatus]:
        return [
            ProviderStatus(
                provider=adapter.name,
                configured=adapter.is_configured(),
                models=adapter.available_models() if adapter.is_configured() else [],
            )
            for adapter in self._adapters
        ]

    def get_available_models(self) -> list[ModelInfo]:
        models: list[ModelInfo] = []
        for adapter in self._configured():
            models.extend(adapter.available_models())
        return models

    def estimate_cost(
        self, model_id: str, prompt_tokens: int, completion_tokens: int
    ) -> CostEstimate:
        return estimate_cost(model_id, prompt_tokens, completion_tokens)

    async def count_tokens(self, text: str, model: str) -> int:
        """Estimate the token count for *text* using LiteLLM's token counter.

        Falls back to a word-count approximation when the model is unsupported.

        Returns:
            Estimated token count (always at least 1).
        """
        try:
            return max(1, litellm.token_counter(model=model, text=text))
        except Exception as exc:
            _log.warning(
                "token_counting_failed",
                model=model,
                error=str(exc),
                fallback="word_count_approximation",
            )
            return max(1, round(len(text.split()) * 1.3))

    def check_context_window(self, model: str, tokens: int) -> dict[str, int | bool]:
        """Report whether *tokens* fit the model's context window."""
        info = get_model_info(model)
        window = info.context_window if info is not None else DEFAULT_CONTEXT_WINDOW
        return {
            "contextWindow": window,
            "fits": tokens <= window,
            "remaining": max(0, window - tokens),
        }

    def _configured(self) -> list[ProviderAdapter]:
        return [a for a in self._adapters if a.is_configured()]
