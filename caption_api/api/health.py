# Common language: Environment/ops probe that surfaces library versions and non-secret config.
# Use this before/after upgrades to confirm no silent drift.

from fastapi import APIRouter
from ..core.settings import settings
from ..captions.presets import PROMPT_STYLES, CAPTION_TEMPLATES
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
    except ImportError:
        return "not-installed"
    return getattr(m, "__version__", "unknown")

@router.get("/healthz")
def healthz():
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic": _ver("pydantic"),
            "pydantic_settings": _ver("pydantic_settings"),
            "httpx": _ver("httpx"),
            "openai": _ver("openai"),
            "PIL": _ver("PIL"),
            "structlog": _ver("structlog"),
        },
        "config": {
            "openai_model": settings.openai_model,
            "openai_base_url": settings.openai_base_url,
            "ollama_url": settings.ollama_url,
            "ollama_model": settings.ollama_model,
            "request_timeout": settings.request_timeout,
            "max_upload_images": settings.max_upload_images,
        },
        "env_keys_present": {
            "OPENAI_API_KEY": bool(settings.openai_api_key),
        },
        "presets": {
            "styles": len(PROMPT_STYLES),
            "templates": len(CAPTION_TEMPLATES),
        },
    }
