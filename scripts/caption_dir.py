"""
Purpose:
- Caption every image in a folder without the web UI.
- Writes <stem>.txt beside each image, or one ZIP with --zip.
- Same pipeline as the API: preset -> provider -> post-processing, one image at a time.

Example:
  python scripts/caption_dir.py ./dataset --service ollama --model llava --style sdxl-tags --prefix TOK
"""

import argparse
import sys
from pathlib import Path

from caption_api.captions.archive import build_archive, successful_entries
from caption_api.captions.batch import CaptionRequest, run_batch, summarize
from caption_api.captions.presets import PROMPT_STYLES, get_prompt_style
from caption_api.core.exceptions import CaptionServiceError
from caption_api.core.logging import configure_logging
from caption_api.core.settings import settings
from caption_api.vlm.captioner import sniff_content_type
from caption_api.vlm.factory import SERVICES, build_generator

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp"}


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Caption a folder of images with a vision model.")
    p.add_argument("folder", type=Path)
    p.add_argument("--service", choices=SERVICES, default="openai")
    p.add_argument("--model", default="")
    p.add_argument("--style", default="flux-semantic", choices=[s.id for s in PROMPT_STYLES])
    p.add_argument("--prefix", default="")
    p.add_argument("--suffix", default="")
    p.add_argument("--max-chars", type=int, default=None, help="Overrides the style default")
    p.add_argument("--detail", default=settings.default_detail, choices=["auto", "low", "high"])
    p.add_argument("--ollama-url", default=None)
    p.add_argument("--zip", type=Path, default=None, help="Write a ZIP instead of .txt files beside images")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    configure_logging(log_level="WARNING", json_output=False)

    paths = sorted(p for p in args.folder.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
    if not paths:
        print(f"no images in {args.folder}", file=sys.stderr)
        return 1

    style = get_prompt_style(args.style)
    config = style.post_process_config(prefix=args.prefix, suffix=args.suffix, max_chars=args.max_chars)
    try:
        generator = build_generator(service=args.service, model=args.model, ollama_url=args.ollama_url)
    except CaptionServiceError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2

    requests = []
    for path in paths:
        payload = path.read_bytes()
        requests.append(CaptionRequest(
            image=payload,
            name=path.name,
            system_message=style.system_message,
            user_prompt=style.user_prompt,
            config=config,
            content_type=sniff_content_type(payload),
            detail=args.detail,
        ))

    items = []
    for item in run_batch(requests, generator.generate):
        items.append(item)
        print(f"{'ok ' if item.ok else 'ERR'} {item.filename}: {item.caption}")
        if item.ok and args.zip is None:
            (args.folder / item.filename).write_text(item.caption, encoding="utf-8")

    if args.zip is not None:
        args.zip.write_bytes(build_archive(successful_entries(items)))
        print(f"wrote {args.zip}")

    s = summarize(items)
    print(f"{s['succeeded']}/{s['total']} captioned, {s['failed']} failed")
    return 0 if s["failed"] == 0 else 3


if __name__ == "__main__":
    sys.exit(main())
