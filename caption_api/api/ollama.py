"""
Purpose:
- Let the UI check a local Ollama server and pick one of its installed models.
"""

from typing import Optional

from fastapi import APIRouter, Query

from ..core.settings import settings
from ..vlm.ollama_captioner import list_ollama_models, ollama_status

router = APIRouter(prefix="/api/v1/ollama", tags=["ollama"])


@router.get("/status")
def status(url: Optional[str] = Query(default=None, description="Ollama base URL")):
    return ollama_status(url or settings.ollama_url)


@router.get("/models")
def models(url: Optional[str] = Query(default=None, description="Ollama base URL")):
    models = list_ollama_models(url or settings.ollama_url)
    return {"ok": True, "count": len(models), "models": models}
