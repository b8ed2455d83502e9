"""Request and response dataclasses for the AI Gateway provider layer.

These types form the provider-agnostic contract between the HTTP layer, the
router and the per-provider adapters.  All of them are immutable
(``frozen=True``).  :class:`CompletionRequest` is validated at construction
time so an invalid request never reaches an adapter.
"""

from dataclasses import dataclass, field
from typing import Any

from aigateway.providers.errors import InvalidRequestError

VALID_ROLES: frozenset[str] = frozenset({"system", "user", "assistant"})


@dataclass(frozen=True)
class Message:
    """One conversation turn."""

    role: str
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    """Parameters for a single completion call.

    Args:
        messages: Conversation history, oldest first.  Must not be empty.
        provider: Explicit provider id (``"openai"``, ``"anthropic"``,
            ``"gemini"``).  ``None`` lets the router choose.
        model: Model id from the catalog.  ``None`` uses the provider default.
        max_tokens: Maximum tokens to generate.  ``None`` uses the adapter
            default.
        temperature: Sampling temperature in ``[0.0, 2.0]``.  ``None`` uses
            the adapter default.
        stream: When ``True`` the caller consumes the streaming path.

    Raises:
        InvalidRequestError: If any field fails validation.
    """

    messages: tuple[Message, ...]
    provider: str | None = None
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    stream: bool = False

    def __post_init__(self) -> None:
        if not self.messages:
            raise InvalidRequestError("Messages array is required")

        # Accept any sequence but store a tuple so the request stays immutable.
        object.__setattr__(self, "messages", tuple(self.messages))

        for i, msg in enumerate(self.messages):
            if msg.role not in VALID_ROLES:
                raise InvalidRequestError(
                    f"messages[{i}] has invalid role '{msg.role}'; "
                    f"must be one of {sorted(VALID_ROLES)}"
                )

        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise InvalidRequestError(f"temperature must be in [0.0, 2.0], got {self.temperature}")

        if self.max_tokens is not None and self.max_tokens <= 0:
            raise InvalidRequestError(
                f"max_tokens must be a positive integer, got {self.max_tokens}"
            )


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class CompletionResponse:
    """Normalised result of a non-streaming completion call.

    Attributes:
        content: Complete generated text.  Never empty.
        provider: Id of the adapter that served the call.
        model: Catalog id of the model that was dispatched.
        usage: Token counts, or ``None`` when the upstream did not report them.
        finish_reason: Stop reason reported by the upstream, if any.
    """

    content: str
    provider: str
    model: str
    usage: TokenUsage | None = None
    finish_reason: str | None = None


@dataclass(frozen=True)
class StreamChunk:
    """One incremental unit of streamed output.

    A stream ends with exactly one chunk where ``done`` is ``True``; its
    ``content`` may be empty.
    """

    content: str
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "done": self.done}


@dataclass(frozen=True)
class ModelInfo:
    """Static catalog entry for one upstream model."""

    id: str
    display_name: str
    provider: str
    context_window: int
    max_output_tokens: int
    input_price_per_million: float
    output_price_per_million: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "provider": self.provider,
            "contextWindow": self.context_window,
            "maxOutputTokens": self.max_output_tokens,
            "inputPricePerMillion": self.input_price_per_million,
            "outputPricePerMillion": self.output_price_per_million,
        }


@dataclass(frozen=True)
class ProviderStatus:
    provider: str
    configured: bool
    models: list[ModelInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "configured": self.configured,
            "models": [m.to_dict() for m in self.models],
        }


@dataclass(frozen=True)
class CostEstimate:
    """Advisory monetary estimate in USD.  Never negative."""

    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "inputCost": self.input_cost,
            "outputCost": self.output_cost,
            "totalCost": self.total_cost,
        }
