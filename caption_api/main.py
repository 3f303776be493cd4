"""
Purpose:
- FastAPI application factory and router mounts.
- Adds CORS for local dev, correlation-id logging, and JSON error bodies for service errors.
- Uvicorn will serve this on 0.0.0.0:8000 by default.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.exceptions import (
    CaptionServiceError,
    ProviderConfigError,
    ProviderUnavailableError,
    UnknownPresetError,
)
from .core.logging import configure_logging, get_logger
from .core.settings import settings
from .api.middleware import CorrelationIDMiddleware
from .api.health import router as health_router
from .api.captions import router as captions_router
from .api.presets import router as presets_router
from .api.ollama import router as ollama_router

logger = get_logger(__name__)

_STATUS_BY_ERROR = (
    (ProviderConfigError, 400),
    (UnknownPresetError, 404),
    (ProviderUnavailableError, 502),
)


async def service_error_handler(request: Request, exc: CaptionServiceError) -> JSONResponse:
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    logger.warning("service_error", path=request.url.path, status_code=status, error=exc.message)
    return JSONResponse(
        status_code=status,
        content={"ok": False, "error": exc.message, "details": exc.details},
    )


def create_app() -> FastAPI:
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(title="Batch Image Caption API", version="0.1.0")
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Correlation-ID"],
    )
    app.add_exception_handler(CaptionServiceError, service_error_handler)

    app.include_router(health_router)
    app.include_router(captions_router)
    app.include_router(presets_router)
    app.include_router(ollama_router)
    return app


app = create_app()
