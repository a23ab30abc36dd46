from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI

from xmlcontent_api import __version__
from xmlcontent_api.config import Settings, get_settings
from xmlcontent_api.content.cache import get_cache_stats
from xmlcontent_api.content.router import router as content_router
from xmlcontent_api.content.types import simple_type_names
from xmlcontent_api.logging import configure_logging
from xmlcontent_api.schemas import HealthResponse

_log_file = os.getenv("XMLCONTENT_LOG_FILE")
configure_logging(
    log_file=Path(_log_file) if _log_file else None,
    enable_structured_logging=os.getenv("XMLCONTENT_STRUCTURED_LOGGING", "false").lower() == "true",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="XML Content JSON Service",
    version=__version__,
    description="Renders schema-defined XML contents as JSON",
    docs_url="/docs" if os.getenv("XMLCONTENT_ENABLE_DOCS", "true").lower() == "true" else None,
    redoc_url="/redoc" if os.getenv("XMLCONTENT_ENABLE_DOCS", "true").lower() == "true" else None,
)

if os.getenv("XMLCONTENT_ENABLE_CORS", "false").lower() == "true":
    from fastapi.middleware.cors import CORSMiddleware

    allowed_origins = os.getenv("XMLCONTENT_ALLOWED_ORIGINS", "").split(",")
    allowed_origins = [origin.strip() for origin in allowed_origins if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"

    if os.getenv("XMLCONTENT_ENFORCE_HTTPS", "false").lower() == "true":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response


app.include_router(content_router)


@app.on_event("startup")
async def startup_event():
    """Report the configured repository roots."""
    try:
        settings = get_settings()
        logger.info(
            f"Serving contents from {settings.resolved_content_root}, "
            f"schemas from {settings.resolved_schema_root}"
        )
    except Exception as e:
        logger.error(f"Invalid configuration: {e}")


SettingsDep = Annotated[Settings, Depends(get_settings)]


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, timestamp=datetime.now(UTC))


@app.get("/health/detailed")
def detailed_health(settings: SettingsDep) -> dict:
    """Detailed health check for production monitoring."""
    try:
        content_root = settings.resolved_content_root
        health_info = {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(UTC).isoformat(),
            "environment": {
                "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
                "content_root": str(content_root),
                "content_root_exists": content_root.is_dir(),
                "schema_root": str(settings.resolved_schema_root),
            },
            "configuration": {
                "max_document_bytes": settings.max_document_bytes,
                "typed_values": settings.render.typed_values,
                "include_missing": settings.render.include_missing,
                "strict": settings.render.strict,
                "simple_types": simple_type_names(),
            },
            "performance": get_cache_stats(),
        }

        try:
            import psutil
            process = psutil.Process()
            health_info["system"] = {
                "cpu_percent": psutil.cpu_percent(interval=0.1),
                "memory_percent": psutil.virtual_memory().percent,
                "process_memory_mb": round(process.memory_info().rss / 1024 / 1024, 2),
                "num_threads": process.num_threads(),
            }
        except ImportError:
            health_info["system"] = {"error": "psutil not available"}

        if not content_root.is_dir():
            health_info["status"] = "degraded"

        return health_info

    except Exception as e:
        logger.error(f"Detailed health check failed: {e}")
        return {
            "status": "error",
            "error": str(e),
            "timestamp": datetime.now(UTC).isoformat(),
        }
