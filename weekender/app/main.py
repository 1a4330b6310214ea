from typing import Any

import sentry_sdk
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration

from .api.routes import photos as photos_routes
from .api.routes import places as places_routes
from .api.routes import plans as plans_routes
from .api.routes import preferences as preferences_routes
from .api.routes import shared as shared_routes
from .errors import register_error_handlers
from .health import health_checker
from .logging_config import configure_structlog, get_logger
from .metrics import PrometheusMiddleware, get_metrics
from .settings import settings
from .utils import add_cors, add_request_id_tracing, add_security_headers

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.SENTRY_RELEASE or "weekender@dev",
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

app = FastAPI(
    title="Weekender API",
    version="0.1.0",
    description="Weekend trip planner: collect places, filter them and share itineraries",
)
add_cors(app)
add_security_headers(app)
add_request_id_tracing(app)
app.add_middleware(PrometheusMiddleware)
register_error_handlers(app)

app.include_router(places_routes.router)
app.include_router(plans_routes.router)
app.include_router(shared_routes.router)
app.include_router(preferences_routes.router)
app.include_router(photos_routes.router)

# Use structlog for structured logging
logger = get_logger(__name__)


@app.get("/health")
async def health():
    """Return service health including dependency checks."""
    health_status = await health_checker.check_all()
    status_code = 200 if health_status["status"] == "healthy" else 503
    body = {
        "status": health_status["status"],
        "timestamp": health_status.get("timestamp"),
        "checks": health_status.get("checks", {}),
    }
    if settings.DEBUG:
        body["details"] = _scrub_health_details(health_status)
    body["service"] = "weekender"
    body["version"] = "0.1.0"

    return JSONResponse(content=body, status_code=status_code)


@app.get("/metrics")
def metrics():
    """Expose Prometheus metrics."""
    try:
        return get_metrics()
    except Exception:  # pragma: no cover - defensive path
        logger.exception("Metrics export failed")
        raise HTTPException(status_code=503, detail="metrics unavailable")


def _scrub_health_details(payload: dict[str, Any]) -> dict[str, Any]:
    """Remove sensitive error fields before returning debug health details."""

    def _scrub(value: Any) -> Any:
        if isinstance(value, dict):
            cleaned: dict[str, Any] = {}
            for key, inner in value.items():
                if key in {"error", "error_type", "traceback"}:
                    continue
                cleaned[key] = _scrub(inner)
            return cleaned
        if isinstance(value, list):
            return [_scrub(item) for item in value]
        return value

    return _scrub(payload)
