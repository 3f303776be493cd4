"""
Purpose:
- Pack finished captions into one ZIP download: one <name>.txt per image, content = caption text.
- Error entries are never written; repeated names get -1, -2 ... before .txt.
"""

from __future__ import annotations
import io
import zipfile
from typing import Iterable, List, Tuple

from .batch import BatchItem


def successful_entries(items: Iterable[BatchItem]) -> List[Tuple[str, str]]:
    return [(it.filename, it.caption) for it in items if it.ok]


def _unique_name(filename: str, used: set[str]) -> str:
    if filename not in used:
        return filename
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        stem, ext = filename, ""
    n = 1
    while True:
        candidate = f"{stem}-{n}.{ext}" if dot else f"{stem}-{n}"
        if candidate not in used:
            return candidate
        n += 1


def build_archive(entries: Iterable[Tuple[str, str]]) -> bytes:
    """Return the bytes of a deflated ZIP holding one text file per (filename, text) pair."""
    buf = io.BytesIO()
    used: set[str] = set()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for filename, text in entries:
            name = _unique_name(filename, used)
            used.add(name)
            zf.writestr(name, text)
    return buf.getvalue()
