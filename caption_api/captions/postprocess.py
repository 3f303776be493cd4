"""
Purpose:
- Turn raw model output into the final caption text that is shown and written to <name>.txt.
- Pure string functions: no I/O, no shared state, safe to call from any thread.

Stage order (later stages assume the earlier ones already ran):
1. negative-phrase filtering (case-insensitive, whole words)
2. whitespace / comma normalization
3. lowercase first letter and drop one trailing period, so the body reads as a clause
4. prefix / suffix composition
5. whitespace collapse over the composed string
6. uppercase first letter
7. length-bounded truncation

Known quirk: stage 3 lowercases the first letter and stage 6 only restores the
first letter of the composed string, so a leading acronym ("NASA rocket")
comes out as "NASA rocket" only when no prefix is set; with a prefix it
becomes "nASA rocket". Letter-level behaviour is kept as-is.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

# Word-boundary truncation may give back at most 20% of the budget.
WORD_BOUNDARY_RATIO = 0.8

_WHITESPACE = re.compile(r"\s+")
_COMMA_RUN = re.compile(r",(?:\s*,)+")
_LEADING_JUNK = re.compile(r"^[,\s]+")
_TRAILING_JUNK = re.compile(r"[,\s]+$")


@dataclass(frozen=True)
class PostProcessConfig:
    prefix: str = ""
    suffix: str = ""
    max_chars: Optional[int] = None
    negative_filters: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.max_chars is not None and self.max_chars <= 0:
            raise ValueError(f"max_chars must be a positive integer, got {self.max_chars!r}")
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "prefix", self.prefix or "")
        object.__setattr__(self, "suffix", self.suffix or "")
        object.__setattr__(self, "negative_filters", tuple(self.negative_filters or ()))


def _phrase_pattern(phrase: str) -> re.Pattern:
    """
    Whole-word, case-insensitive pattern for a literal phrase.

    - re.escape() keeps the phrase literal (no user regex).
    - Escaped spaces become \\s+ so "there is a" also matches "there is\\na".
    - Lookarounds instead of \\b so phrases that start/end with punctuation
      ("[TRIGGER]") still require a non-word neighbour.
    """
    esc = re.escape(phrase.strip())
    esc = esc.replace(r"\ ", r"\s+")
    return re.compile(rf"(?<!\w){esc}(?!\w)", re.IGNORECASE)


def apply_negative_filters(text: str, phrases: Iterable[str]) -> str:
    """Delete every whole-word occurrence of each phrase, in list order."""
    for phrase in phrases:
        if not phrase or not phrase.strip():
            continue
        text = _phrase_pattern(phrase).sub("", text)
    return text


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize(text: str) -> str:
    """Single spaces, single commas, no leading/trailing commas or spaces."""
    text = _WHITESPACE.sub(" ", text)
    text = _COMMA_RUN.sub(",", text)
    text = _LEADING_JUNK.sub("", text)
    text = _TRAILING_JUNK.sub("", text)
    return text.strip()


def as_clause(text: str) -> str:
    if not text:
        return text
    text = text[0].lower() + text[1:]
    if text.endswith("."):
        text = text[:-1]
    # ",." leaves a comma behind once the period goes
    return _TRAILING_JUNK.sub("", text)


def compose(body: str, prefix: str = "", suffix: str = "") -> str:
    """
    Join prefix, body and suffix with ", ".

    An empty/absent prefix or suffix contributes nothing (no orphan ", ").
    An empty body composes to "" so a fully filtered caption stays empty.
    """
    if not body:
        return ""

    prefix = (prefix or "").strip()
    if prefix.endswith(","):
        prefix = prefix[:-1].rstrip()
    suffix = (suffix or "").strip()
    if suffix.startswith(","):
        suffix = suffix[1:].lstrip()

    prefix_part = f"{prefix}, " if prefix else ""
    suffix_part = f", {suffix}" if suffix else ""
    return f"{prefix_part}{body}{suffix_part}"


def capitalize_first(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


def truncate(text: str, max_chars: Optional[int]) -> str:
    """
    One-shot length limit.

    - Within budget (or no budget): returned unchanged.
    - Otherwise hard-cut to max_chars and trim the tail.
    - If the last space of the cut sits at index >= 80% of max_chars, cut there
      instead; else keep the mid-word hard cut.
    The tail trim also drops commas so a cut never ends on a dangling ",".
    """
    if max_chars is None or len(text) <= max_chars:
        return text

    cut = text[:max_chars].rstrip()
    last_space = cut.rfind(" ")
    if last_space >= max_chars * WORD_BOUNDARY_RATIO:
        cut = cut[:last_space]
    return _TRAILING_JUNK.sub("", cut)


def process(raw: Optional[str], config: Optional[PostProcessConfig] = None) -> str:
    """
    Run the full pipeline over one raw caption.

    Empty input, no filters, no prefix/suffix and no limit are all valid;
    an empty (or fully filtered) caption yields "".
    """
    config = config or PostProcessConfig()
    text = raw or ""

    text = apply_negative_filters(text, config.negative_filters)
    text = normalize(text)
    text = as_clause(text)
    text = compose(text, config.prefix, config.suffix)
    text = collapse_whitespace(text)
    text = capitalize_first(text)
    return truncate(text, config.max_chars)
