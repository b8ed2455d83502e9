"""Static model catalog.

Hand-maintained pricing (USD per million tokens) and capacity metadata for
every model each adapter exposes.  Loaded once at import time and never
mutated.  The first entry of each provider's tuple is that provider's default
model.

Catalog revision: 2024-12.
"""

from aigateway.providers.models import ModelInfo

OPENAI_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="gpt-4o",
        display_name="GPT-4o",
        provider="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        input_price_per_million=2.5,
        output_price_per_million=10.0,
    ),
    ModelInfo(
        id="gpt-4o-mini",
        display_name="GPT-4o Mini",
        provider="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        input_price_per_million=0.15,
        output_price_per_million=0.6,
    ),
    ModelInfo(
        id="gpt-4-turbo",
        display_name="GPT-4 Turbo",
        provider="openai",
        context_window=128_000,
        max_output_tokens=4_096,
        input_price_per_million=10.0,
        output_price_per_million=30.0,
    ),
    ModelInfo(
        id="gpt-3.5-turbo",
        display_name="GPT-3.5 Turbo",
        provider="openai",
        context_window=16_385,
        max_output_tokens=4_096,
        input_price_per_million=0.5,
        output_price_per_million=1.5,
    ),
)

ANTHROPIC_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="claude-3-5-sonnet-20241022",
        display_name="Claude 3.5 Sonnet",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=8_192,
        input_price_per_million=3.0,
        output_price_per_million=15.0,
    ),
    ModelInfo(
        id="claude-3-opus-20240229",
        display_name="Claude 3 Opus",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=4_096,
        input_price_per_million=15.0,
        output_price_per_million=75.0,
    ),
    ModelInfo(
        id="claude-3-sonnet-20240229",
        display_name="Claude 3 Sonnet",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=4_096,
        input_price_per_million=3.0,
        output_price_per_million=15.0,
    ),
    ModelInfo(
        id="claude-3-haiku-20240307",
        display_name="Claude 3 Haiku",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=4_096,
        input_price_per_million=0.25,
        output_price_per_million=1.25,
    ),
)

GEMINI_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="gemini-1.5-flash",
        display_name="Gemini 1.5 Flash",
        provider="gemini",
        context_window=1_000_000,
        max_output_tokens=8_192,
        input_price_per_million=0.075,
        output_price_per_million=0.3,
    ),
    ModelInfo(
        id="gemini-1.5-pro",
        display_name="Gemini 1.5 Pro",
        provider="gemini",
        context_window=1_000_000,
        max_output_tokens=8_192,
        input_price_per_million=1.25,
        output_price_per_million=5.0,
    ),
    ModelInfo(
        id="gemini-2.0-flash",
        display_name="Gemini 2.0 Flash",
        provider="gemini",
        context_window=1_048_576,
        max_output_tokens=8_192,
        input_price_per_million=0.1,
        output_price_per_million=0.4,
    ),
    ModelInfo(
        id="gemini-pro",
        display_name="Gemini Pro",
        provider="gemini",
        context_window=30_720,
        max_output_tokens=2_048,
        input_price_per_million=0.5,
        output_price_per_million=1.5,
    ),
)

ALL_MODELS: tuple[ModelInfo, ...] = OPENAI_MODELS + ANTHROPIC_MODELS + GEMINI_MODELS

# Context window assumed for ids missing from the catalog.
DEFAULT_CONTEXT_WINDOW = 4_096


def get_model_info(model_id: str) -> ModelInfo | None:
    """Return the first catalog entry with *model_id*, or ``None``."""
    for model in ALL_MODELS:
        if model.id == model_id:
            return model
    return None


def get_models_for_provider(provider: str) -> tuple[ModelInfo, ...]:
    return tuple(m for m in ALL_MODELS if m.provider == provider)


def get_provider_from_model(model_id: str) -> str | None:
    """Derive the provider for *model_id*.

    Catalog ids are matched exactly; otherwise well-known prefixes are used so
    that newer model names still resolve to the right vendor.
    """
    info = get_model_info(model_id)
    if info is not None:
        return info.provider
    if model_id.startswith(("gpt-", "o1", "o3")):
        return "openai"
    if model_id.startswith("claude-"):
        return "anthropic"
    if model_id.startswith("gemini"):
        return "gemini"
    return None
