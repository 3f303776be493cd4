"""
Purpose:
- /stream: caption uploaded images one by one and stream each result as a server-sent event.
- /archive: turn the finished results into a ZIP of <name>.txt files for download.

Event shape (one per image, upload order):
  data: {"ok": true, "filename": "cat.txt", "caption": "..."}
  data: {"ok": false, "filename": "dog.txt", "caption": "Error: ...", "error": "..."}
"""

import json
from typing import Iterator, List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response, StreamingResponse
from pydantic import BaseModel, Field

from ..captions.archive import build_archive
from ..captions.batch import BatchItem, CaptionRequest, caption_filename, run_batch
from ..captions.postprocess import PostProcessConfig
from ..captions.presets import get_prompt_style
from ..core.logging import get_correlation_id, get_logger
from ..core.settings import settings
from ..vlm.captioner import sniff_content_type
from ..vlm.factory import build_generator

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/captions", tags=["captions"])


def _parse_max_chars(raw: Optional[str]) -> Optional[int]:
    # blank, non-numeric and non-positive values all mean "no limit"
    try:
        value = int((raw or "").strip())
    except ValueError:
        return None
    return value if value > 0 else None


def _sse(items: Iterator[BatchItem]) -> Iterator[str]:
    # An abandoned stream closes the batch too, so no further image reaches the model.
    try:
        for item in items:
            yield f"data: {json.dumps(item.to_event(), ensure_ascii=False)}\n\n"
    finally:
        close = getattr(items, "close", None)
        if close is not None:
            close()


@router.post("/stream")
async def stream_captions(
    images: List[UploadFile] = File(...),
    prefix: str = Form(""),
    suffix: str = Form(""),
    systemMessage: Optional[str] = Form(None),
    userPrompt: Optional[str] = Form(None),
    service: str = Form("openai"),
    model: str = Form(""),
    detail: Optional[str] = Form(None),
    apiKey: Optional[str] = Form(None),
    ollamaUrl: Optional[str] = Form(None),
    maxChars: Optional[str] = Form(None),
    promptStyleId: Optional[str] = Form(None),
):
    if len(images) > settings.max_upload_images:
        raise HTTPException(status_code=400, detail=f"At most {settings.max_upload_images} images per batch")

    style = get_prompt_style(promptStyleId) if promptStyleId else None
    max_chars = _parse_max_chars(maxChars)
    if style is not None:
        config = style.post_process_config(prefix=prefix, suffix=suffix, max_chars=max_chars)
    else:
        config = PostProcessConfig(prefix=prefix, suffix=suffix, max_chars=max_chars)

    system_message = systemMessage or (style.system_message if style else settings.default_system_message)
    user_prompt = userPrompt or (style.user_prompt if style else settings.default_user_prompt)

    # Provider config errors surface as HTTP errors before any streaming starts.
    generator = build_generator(service=service, model=model, api_key=apiKey, ollama_url=ollamaUrl)

    requests: List[CaptionRequest] = []
    for image in images:
        payload = await image.read()
        requests.append(CaptionRequest(
            image=payload,
            name=image.filename or "",
            system_message=system_message,
            user_prompt=user_prompt,
            config=config,
            content_type=sniff_content_type(payload, image.content_type),
            detail=detail or settings.default_detail,
        ))

    logger.info("batch_started", images=len(requests), service=service, model=model or None,
                style=style.id if style else None, max_chars=config.max_chars)

    return StreamingResponse(
        _sse(run_batch(requests, generator.generate, correlation_id=get_correlation_id() or None)),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


class ArchiveEntry(BaseModel):
    filename: str
    caption: str = ""
    ok: bool = True


class ArchiveRequest(BaseModel):
    items: List[ArchiveEntry] = Field(default_factory=list)


@router.post("/archive")
def download_archive(payload: ArchiveRequest):
    """
    ZIP of successful captions; error entries are skipped.
    Names are re-derived so client-sent paths cannot escape the archive root.
    """
    entries = [(caption_filename(e.filename), e.caption) for e in payload.items if e.ok]
    data = build_archive(entries)
    logger.info("archive_built", files=len(entries), bytes=len(data))
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{settings.archive_filename}"'},
    )
