"""Custom exception hierarchy for AI Gateway errors.

Every failure the router or an adapter can produce is one of these typed
exceptions, so HTTP handlers never depend on a vendor SDK's exception classes.
Each class carries the HTTP status the outermost handler should answer with.
"""


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        message: Human-readable error description.
        provider: Provider name (e.g. "openai", "anthropic").  ``None`` when
            the error happened before a provider was selected.
        model: Model id involved in the failing call, when known.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.model = model
        super().__init__(message)


class InvalidRequestError(GatewayError):
    """Raised for malformed requests (empty messages, bad role, bad ranges)."""

    status_code = 400


class UnknownProviderError(GatewayError):
    """Raised when an explicitly requested provider is not registered."""

    status_code = 400


class ProviderNotConfiguredError(GatewayError):
    """Raised when an explicitly requested provider has no credentials."""

    status_code = 400


class NoProviderConfiguredError(GatewayError):
    """Raised when no registered provider is usable at all."""

    status_code = 500


class InvalidConversationShapeError(GatewayError):
    """Raised when a conversation violates an upstream's structural rules.

    Checked before dispatch, e.g. Gemini chat sessions require the final turn
    to come from the user.
    """

    status_code = 400


class EmptyCompletionError(GatewayError):
    """Raised when the upstream response contains no text content."""

    status_code = 500


class ProviderApiError(GatewayError):
    """Wraps any transport or upstream-reported failure.

    The upstream SDK exception is chained as ``__cause__`` but never exposed
    as the raised type.
    """

    status_code = 500
