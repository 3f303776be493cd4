"""
Purpose:
- Drive uploaded images through a caption generator strictly one at a time.
- Post-process every raw caption and yield (filename, caption | ErrorMarker) in upload order.
- One image failing never stops the batch: the failure becomes an ErrorMarker entry.

How it's used:
- run_batch() is a lazy generator; the HTTP layer streams each item as it arrives.
- Closing the generator (consumer gone) stops the batch between two images.
- Retries/timeouts belong to the generator (provider SDK), not to this loop.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, Dict, Iterable, Iterator, Optional, Union

from ..core.logging import get_logger
from .postprocess import PostProcessConfig, process

logger = get_logger(__name__)


def caption_filename(name: str) -> str:
    """'photos/cat.01.jpg' -> 'cat.01.txt' (Windows separators accepted)."""
    stem = PurePosixPath((name or "").replace("\\", "/")).stem
    return f"{stem or 'image'}.txt"


@dataclass(frozen=True)
class CaptionRequest:
    image: bytes = field(repr=False)
    name: str
    system_message: str
    user_prompt: str
    config: PostProcessConfig = field(default_factory=PostProcessConfig)
    content_type: str = "image/jpeg"
    detail: str = "auto"    # "auto" | "low" | "high"

    @property
    def filename(self) -> str:
        return caption_filename(self.name)


@dataclass(frozen=True)
class ErrorMarker:
    message: str


@dataclass(frozen=True)
class BatchItem:
    filename: str
    result: Union[str, ErrorMarker]

    @property
    def ok(self) -> bool:
        return not isinstance(self.result, ErrorMarker)

    @property
    def caption(self) -> str:
        if isinstance(self.result, ErrorMarker):
            return f"Error: {self.result.message}"
        return self.result

    def to_event(self) -> Dict[str, object]:
        event: Dict[str, object] = {"ok": self.ok, "filename": self.filename, "caption": self.caption}
        if isinstance(self.result, ErrorMarker):
            event["error"] = self.result.message
        return event


GenerateFn = Callable[[CaptionRequest], str]


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def run_batch(
    requests: Iterable[CaptionRequest],
    generate: GenerateFn,
    correlation_id: Optional[str] = None,
) -> Iterator[BatchItem]:
    """
    Yield one BatchItem per request, in order.

    Each iteration waits for generate(request) before the next request starts.
    correlation_id is bound onto every batch log event; the generator may be
    drained from a worker thread that does not see the request context.
    """
    log = logger.bind(correlation_id=correlation_id) if correlation_id else logger
    done = failed = 0
    try:
        for index, request in enumerate(requests):
            filename = request.filename
            try:
                raw = generate(request)
            except Exception as exc:
                failed += 1
                done += 1
                message = _error_message(exc)
                log.warning("caption_failed", index=index, filename=filename, error=message)
                yield BatchItem(filename=filename, result=ErrorMarker(message))
                continue

            caption = process(raw, request.config)
            done += 1
            log.info("caption_ready", index=index, filename=filename, chars=len(caption))
            yield BatchItem(filename=filename, result=caption)
    except GeneratorExit:
        log.info("batch_cancelled", completed=done, failed=failed)
        raise

    log.info("batch_finished", completed=done, failed=failed)


def summarize(items: Iterable[BatchItem]) -> Dict[str, int]:
    total = succeeded = 0
    for it in items:
        total += 1
        if it.ok:
            succeeded += 1
    return {"total": total, "succeeded": succeeded, "failed": total - succeeded}
