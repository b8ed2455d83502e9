from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from opentelemetry import trace

from aigateway.config import settings
from aigateway.providers import ProviderRouter

router = APIRouter(prefix="/health", tags=["health"])
log = structlog.get_logger()
tracer = trace.get_tracer(__name__)


@router.get("")
async def health() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": settings.app_version,
        }
    )


@router.get("/live")
async def liveness() -> JSONResponse:
    """Kubernetes liveness probe: always returns 200 if the process is running."""
    return JSONResponse(content={"status": "alive"})


@router.get("/ready")
async def readiness(request: Request) -> JSONResponse:
    """Kubernetes readiness probe: ready once at least one provider is configured.

    Provider configuration is fixed at startup, so no upstream call is made.
    """
    with tracer.start_as_current_span("health.readiness"):
        gateway: ProviderRouter | None = getattr(request.app.state, "router", None)
        if gateway is None:
            log.warning("Readiness check failed", reason="router not initialised")
            return JSONResponse(
                status_code=503,
                content={"status": "unavailable", "errors": {"router": "not initialised"}},
            )

        checks = {
            status.provider: "configured" if status.configured else "not_configured"
            for status in gateway.get_provider_status()
        }

    if "configured" not in checks.values():
        log.warning("Readiness check failed", reason="no provider configured")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unavailable",
                "checks": checks,
                "errors": {"providers": "No AI provider is configured"},
            },
        )

    return JSONResponse(content={"status": "ready", "checks": checks})
