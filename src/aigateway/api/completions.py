"""Completion and catalog endpoints under ``/v1/ai``.

Translates between the JSON wire format and the gateway's internal
:class:`~aigateway.providers.CompletionRequest` type, hands streaming requests
to the SSE bridge, and is the only place where a typed gateway error becomes an
HTTP status and ``{"success": false, "error": ...}`` body.
"""

import time
import uuid
from typing import Any, Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from opentelemetry import trace
from opentelemetry.trace import StatusCode
from pydantic import BaseModel, ConfigDict, Field

from aigateway.api.streaming import stream_response
from aigateway.config import settings
from aigateway.providers import (
    CompletionRequest,
    CompletionResponse,
    GatewayError,
    Message,
    ProviderRouter,
)
from aigateway.telemetry import record_cost, record_llm_call

router = APIRouter(prefix="/v1/ai", tags=["completions"])

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class _Message(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1)


class CompletionBody(BaseModel):
    """Provider-agnostic completion request body."""

    model_config = ConfigDict(populate_by_name=True)

    # Empty or missing messages are rejected by CompletionRequest itself.
    messages: list[_Message] = Field(default_factory=list)
    provider: str | None = None
    model: str | None = None
    max_tokens: int | None = Field(default=None, gt=0, alias="maxTokens")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    stream: bool = False


class CostBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str
    prompt_tokens: int = Field(ge=0, alias="promptTokens")
    completion_tokens: int = Field(ge=0, alias="completionTokens")


class TokenCountBody(BaseModel):
    text: str
    model: str


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def get_router(request: Request) -> ProviderRouter:
    """Return the shared :class:`ProviderRouter` from ``app.state``."""
    gateway: ProviderRouter | None = getattr(request.app.state, "router", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Router not initialised")
    return gateway


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/completions", response_model=None)
async def create_completion(
    body: CompletionBody,
    gateway: ProviderRouter = Depends(get_router),
) -> StreamingResponse | JSONResponse:
    """Generate a completion, streaming it as SSE when ``stream`` is true."""
    request_id = str(uuid.uuid4())
    start_time = time.monotonic()
    mode = "stream" if body.stream else "complete"

    log = _log.bind(
        request_id=request_id,
        requested_provider=body.provider,
        model=body.model,
        stream=body.stream,
    )

    with _tracer.start_as_current_span("gateway.completions") as span:
        span.set_attribute("llm.stream", body.stream)
        if body.model:
            span.set_attribute("gen_ai.request.model", body.model)
        if body.provider:
            span.set_attribute("gateway.requested_provider", body.provider)

        log.info("completion_request_start", message_count=len(body.messages))

        try:
            completion_request = CompletionRequest(
                messages=tuple(Message(role=m.role, content=m.content) for m in body.messages),
                provider=body.provider,
                model=body.model,
                max_tokens=body.max_tokens,
                temperature=body.temperature,
                stream=body.stream,
            )

            if body.stream:
                provider_name, chunks = gateway.stream(completion_request)
                span.set_attribute("gen_ai.system", provider_name)
                return stream_response(
                    chunks,
                    provider_name,
                    model=body.model,
                    log=log,
                    start_time=start_time,
                    headers={"X-Request-ID": request_id, "X-Provider": provider_name},
                )

            response = await gateway.complete(completion_request)

        except GatewayError as exc:
            span.record_exception(exc)
            span.set_status(StatusCode.ERROR, exc.message)
            duration = time.monotonic() - start_time
            log.error(
                "completion_request_error",
                error_type=type(exc).__name__,
                error=exc.message,
                provider=exc.provider,
                model=exc.model or body.model,
                duration_ms=round(duration * 1000, 2),
            )
            record_llm_call(exc.provider or "none", mode, "error", duration)
            return JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "error": exc.message},
                headers={"X-Request-ID": request_id},
            )

        except Exception as exc:
            span.record_exception(exc)
            span.set_status(StatusCode.ERROR, str(exc))
            duration = time.monotonic() - start_time
            log.exception(
                "completion_request_unhandled_error",
                error_type=type(exc).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            record_llm_call("none", mode, "error", duration)
            content: dict[str, Any] = {"success": False, "error": "Failed to generate completion"}
            if not settings.is_production:
                content["details"] = str(exc)
            return JSONResponse(
                status_code=500, content=content, headers={"X-Request-ID": request_id}
            )

        span.set_attribute("gen_ai.system", response.provider)
        data = _response_data(response, gateway)
        duration = time.monotonic() - start_time
        log.info(
            "completion_request_complete",
            provider=response.provider,
            model=response.model,
            usage=data.get("usage"),
            duration_ms=round(duration * 1000, 2),
        )
        record_llm_call(response.provider, mode, "success", duration)
        if "cost" in data:
            record_cost(response.provider, response.model, data["cost"]["totalCost"])

        return JSONResponse(
            content={"success": True, "data": data},
            headers={"X-Request-ID": request_id, "X-Provider": response.provider},
        )


@router.get("/providers")
async def list_providers(gateway: ProviderRouter = Depends(get_router)) -> JSONResponse:
    """Status of every registered provider plus the models currently usable."""
    try:
        providers = [status.to_dict() for status in gateway.get_provider_status()]
        models = [model.to_dict() for model in gateway.get_available_models()]
    except Exception:
        _log.exception("list_providers_error")
        return JSONResponse(
            status_code=500, content={"success": False, "error": "Failed to get providers"}
        )
    return JSONResponse(
        content={"success": True, "data": {"providers": providers, "models": models}}
    )


@router.get("/models")
async def list_models(gateway: ProviderRouter = Depends(get_router)) -> JSONResponse:
    try:
        models = [model.to_dict() for model in gateway.get_available_models()]
    except Exception:
        _log.exception("list_models_error")
        return JSONResponse(
            status_code=500, content={"success": False, "error": "Failed to get models"}
        )
    return JSONResponse(content={"success": True, "data": {"models": models}})


@router.post("/cost")
async def estimate_cost(
    body: CostBody,
    gateway: ProviderRouter = Depends(get_router),
) -> JSONResponse:
    """Advisory cost for a token count; unknown models cost zero."""
    estimate = gateway.estimate_cost(body.model, body.prompt_tokens, body.completion_tokens)
    return JSONResponse(content={"success": True, "data": estimate.to_dict()})


@router.post("/tokens")
async def count_tokens(
    body: TokenCountBody,
    gateway: ProviderRouter = Depends(get_router),
) -> JSONResponse:
    """Estimate prompt size and whether it fits the model's context window."""
    tokens = await gateway.count_tokens(body.text, body.model)
    window = gateway.check_context_window(body.model, tokens)
    return JSONResponse(
        content={
            "success": True,
            "data": {"model": body.model, "tokens": tokens, **window},
        }
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _response_data(response: CompletionResponse, gateway: ProviderRouter) -> dict[str, Any]:
    """Build the ``data`` envelope, omitting fields the upstream did not report."""
    data: dict[str, Any] = {
        "content": response.content,
        "provider": response.provider,
        "model": response.model,
    }
    if response.usage is not None:
        data["usage"] = response.usage.to_dict()
        data["cost"] = gateway.estimate_cost(
            response.model, response.usage.prompt_tokens, response.usage.completion_tokens
        ).to_dict()
    if response.finish_reason is not None:
        data["finishReason"] = response.finish_reason
    return data
