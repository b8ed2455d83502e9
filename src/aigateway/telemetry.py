"""Prometheus metrics for the gateway.

Metrics live on the default registry so the ``/metrics`` ASGI app mounted in
:mod:`aigateway.main` exposes them.  Callers use the helpers below rather than
touching ``prometheus_client`` directly.
"""

from prometheus_client import Counter, Histogram

__all__ = ["record_llm_call", "record_cost"]

LLM_REQUEST_TOTAL = Counter(
    "gateway_llm_request_total",
    "Completion requests by provider, mode and outcome",
    ["provider", "mode", "status"],
)
LLM_LATENCY = Histogram(
    "gateway_llm_latency_seconds",
    "End-to-end completion latency",
    ["provider", "mode"],
)
LLM_ESTIMATED_COST = Counter(
    "gateway_llm_estimated_cost_usd_total",
    "Advisory cost estimate accumulated per model",
    ["provider", "model"],
)


def record_llm_call(provider: str, mode: str, status: str, duration_seconds: float) -> None:
    """Count one completion call and observe its latency.

    ``provider`` is ``"none"`` when the request failed before routing.
    """
    LLM_REQUEST_TOTAL.labels(provider=provider, mode=mode, status=status).inc()
    LLM_LATENCY.labels(provider=provider, mode=mode).observe(duration_seconds)


def record_cost(provider: str, model: str, total_cost: float) -> None:
    if total_cost > 0:
        LLM_ESTIMATED_COST.labels(provider=provider, model=model).inc(total_cost)
