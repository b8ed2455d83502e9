"""Advisory cost estimation from the static catalog."""

from aigateway.providers.catalog import get_model_info
from aigateway.providers.models import CostEstimate

_TOKENS_PER_UNIT = 1_000_000


def estimate_cost(model_id: str, prompt_tokens: int, completion_tokens: int) -> CostEstimate:
    """Estimate the USD cost of a call to *model_id*.

    Unknown models yield an all-zero estimate instead of an error; cost is
    telemetry, not a gate.  No rounding is applied.
    """
    model = get_model_info(model_id)
    if model is None:
        return CostEstimate()

    input_cost = max(prompt_tokens, 0) / _TOKENS_PER_UNIT * model.input_price_per_million
    output_cost = max(completion_tokens, 0) / _TOKENS_PER_UNIT * model.output_price_per_million
    return CostEstimate(
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost,
    )
