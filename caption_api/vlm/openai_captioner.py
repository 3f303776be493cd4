"""
Purpose:
- Hosted caption provider backed by the OpenAI Chat Completions API.
- One request per image: system message + [user prompt, image data URL with detail hint].

Notes:
- Timeouts and retries are handled by the SDK client (settings.request_timeout).
- Any SDK error is re-raised as CaptionGenerationError with a readable message.
"""

from __future__ import annotations
from typing import Optional

import openai
from openai import OpenAI

from ..captions.batch import CaptionRequest
from ..core.exceptions import CaptionGenerationError
from ..core.logging import get_logger
from .captioner import image_data_url

logger = get_logger(__name__)

VALID_DETAILS = ("auto", "low", "high")


class OpenAICaptioner:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self._client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    def _messages(self, request: CaptionRequest) -> list[dict]:
        detail = request.detail if request.detail in VALID_DETAILS else "auto"
        return [
            {"role": "system", "content": request.system_message},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": request.user_prompt},
                    {"type": "image_url", "image_url": {"url": image_data_url(request), "detail": detail}},
                ],
            },
        ]

    def generate(self, request: CaptionRequest) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=self._messages(request),
            )
        except openai.OpenAIError as e:
            raise CaptionGenerationError(str(e) or e.__class__.__name__, {"provider": "openai"}) from e

        choices = getattr(resp, "choices", None) or []
        if not choices:
            raise CaptionGenerationError("OpenAI returned no choices", {"provider": "openai"})
        text = choices[0].message.content or ""
        logger.debug("openai_caption", model=self.model, filename=request.filename, chars=len(text))
        return text
