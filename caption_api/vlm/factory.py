"""
Purpose:
- Build the caption provider for one batch from form fields + settings.
- "openai" (default) needs an API key from the form or OPENAI_API_KEY.
- "ollama" needs a model name from the form or OLLAMA_MODEL.
"""

from __future__ import annotations
from typing import Optional

from ..core.exceptions import ProviderConfigError
from ..core.settings import settings
from .captioner import CaptionGenerator
from .ollama_captioner import OllamaCaptioner
from .openai_captioner import OpenAICaptioner

SERVICES = ("openai", "ollama")


def build_generator(
    service: str = "openai",
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    ollama_url: Optional[str] = None,
) -> CaptionGenerator:
    service = (service or "openai").strip().lower()
    if service not in SERVICES:
        raise ProviderConfigError(f"Unknown service: {service}", {"supported": list(SERVICES)})

    if service == "ollama":
        name = model or settings.ollama_model
        if not name:
            raise ProviderConfigError("Please select an Ollama model", {"service": service})
        return OllamaCaptioner(
            base_url=ollama_url or settings.ollama_url,
            model=name,
            timeout=settings.request_timeout,
        )

    key = api_key or settings.openai_api_key
    if not key:
        raise ProviderConfigError("OpenAI API key is required", {"service": service})
    return OpenAICaptioner(
        api_key=key,
        model=model or settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
    )
