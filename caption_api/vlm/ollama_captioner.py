"""
Purpose:
- Local caption provider backed by an Ollama server (llava, moondream, bakllava, ...).
- Server probes used by the UI: status (/api/version) and installed models (/api/tags).

Notes:
- The base URL may be given with or without a trailing /api.
- Non-streaming /api/chat call; the image travels base64-encoded on the user message.
"""

from __future__ import annotations
from typing import Any, Dict, List

import httpx

from ..captions.batch import CaptionRequest
from ..core.exceptions import CaptionGenerationError, ProviderUnavailableError
from ..core.logging import get_logger
from .captioner import image_b64

logger = get_logger(__name__)

PROBE_TIMEOUT = 5.0


def normalize_base_url(url: str) -> str:
    base = (url or "").strip().rstrip("/")
    if base.endswith("/api"):
        base = base[: -len("/api")]
    return base


class OllamaCaptioner:
    def __init__(self, base_url: str, model: str, timeout: float = 120.0):
        self.base_url = normalize_base_url(base_url)
        self.model = model
        self.timeout = timeout

    def _body(self, request: CaptionRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": request.system_message},
                {"role": "user", "content": request.user_prompt, "images": [image_b64(request)]},
            ],
        }

    def generate(self, request: CaptionRequest) -> str:
        try:
            r = httpx.post(f"{self.base_url}/api/chat", json=self._body(request), timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise CaptionGenerationError("Timed out waiting for Ollama response", {"provider": "ollama"}) from e
        except httpx.HTTPError as e:
            raise CaptionGenerationError(f"Failed to reach Ollama at {self.base_url}", {"provider": "ollama"}) from e

        if r.status_code >= 400:
            message = r.text.strip() or f"HTTP {r.status_code}"
            raise CaptionGenerationError(f"Ollama error: {message}", {"provider": "ollama", "status": r.status_code})

        try:
            data = r.json()
        except ValueError as e:
            raise CaptionGenerationError("Invalid JSON payload from Ollama", {"provider": "ollama"}) from e

        message = data.get("message") if isinstance(data, dict) else None
        text = message.get("content") if isinstance(message, dict) else None
        if not isinstance(text, str):
            raise CaptionGenerationError("Unexpected response format from Ollama", {"provider": "ollama"})
        logger.debug("ollama_caption", model=self.model, filename=request.filename, chars=len(text))
        return text


def ollama_status(url: str) -> Dict[str, Any]:
    """Never raises: the UI renders both states."""
    base = normalize_base_url(url)
    try:
        r = httpx.get(f"{base}/api/version", timeout=PROBE_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        return {"status": "error", "url": base, "message": f"Ollama server not reachable: {e!r}"}
    if not isinstance(data, dict):
        return {"status": "error", "url": base, "message": "Unexpected response format from Ollama"}
    version = data.get("version")
    return {"status": "running", "url": base, "version": version}


def list_ollama_models(url: str) -> List[Dict[str, Any]]:
    base = normalize_base_url(url)
    try:
        r = httpx.get(f"{base}/api/tags", timeout=PROBE_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        raise ProviderUnavailableError(f"Failed to fetch models from {base}", {"url": base}) from e
    if not isinstance(data, dict):
        raise ProviderUnavailableError(f"Unexpected response format from {base}", {"url": base})

    models = []
    for m in (data.get("models") or []):
        name = m.get("name")
        if not name:
            continue
        details = m.get("details") or {}
        models.append({
            "name": name,
            "size": m.get("size"),
            "modified_at": m.get("modified_at"),
            "families": details.get("families") or [],
        })
    return models
