"""Provider abstraction layer.

Public surface area for the providers package.  Import from here rather than
from the individual submodules so internal structure can change freely.

Example::

    from aigateway.config import settings
    from aigateway.providers import CompletionRequest, Message, ProviderRouter

    router = ProviderRouter.from_settings(settings)
    request = CompletionRequest(
        messages=[Message(role="user", content="Hello")],
        model="claude-3-5-sonnet-20241022",
    )
    response = await router.complete(request)
    cost = router.estimate_cost(
        response.model, response.usage.prompt_tokens, response.usage.completion_tokens
    )
"""

from aigateway.providers.anthropic_adapter import AnthropicAdapter
from aigateway.providers.base import BaseProviderAdapter, ProviderAdapter
from aigateway.providers.catalog import (
    ALL_MODELS,
    ANTHROPIC_MODELS,
    GEMINI_MODELS,
    OPENAI_MODELS,
    get_model_info,
    get_models_for_provider,
    get_provider_from_model,
)
from aigateway.providers.cost import estimate_cost
from aigateway.providers.errors import (
    EmptyCompletionError,
    GatewayError,
    InvalidConversationShapeError,
    InvalidRequestError,
    NoProviderConfiguredError,
    ProviderApiError,
    ProviderNotConfiguredError,
    UnknownProviderError,
)
from aigateway.providers.gemini_adapter import GeminiAdapter
from aigateway.providers.models import (
    CompletionRequest,
    CompletionResponse,
    CostEstimate,
    Message,
    ModelInfo,
    ProviderStatus,
    StreamChunk,
    TokenUsage,
)
from aigateway.providers.openai_adapter import OpenAIAdapter
from aigateway.providers.router import ProviderRouter

__all__ = [
    # Models
    "Message",
    "CompletionRequest",
    "CompletionResponse",
    "TokenUsage",
    "StreamChunk",
    "ModelInfo",
    "ProviderStatus",
    "CostEstimate",
    # Catalog / cost
    "ALL_MODELS",
    "OPENAI_MODELS",
    "ANTHROPIC_MODELS",
    "GEMINI_MODELS",
    "get_model_info",
    "get_models_for_provider",
    "get_provider_from_model",
    "estimate_cost",
    # Adapters / routing
    "ProviderAdapter",
    "BaseProviderAdapter",
    "OpenAIAdapter",
    "AnthropicAdapter",
    "GeminiAdapter",
    "ProviderRouter",
    # Errors
    "GatewayError",
    "InvalidRequestError",
    "UnknownProviderError",
    "ProviderNotConfiguredError",
    "NoProviderConfiguredError",
    "InvalidConversationShapeError",
    "EmptyCompletionError",
    "ProviderApiError",
]
