"""Text utilities: word counting, sentence splitting, excerpts, similarity."""

import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_END_RE = re.compile(r"[.!?]+")


def count_words(text: str) -> int:
    """Count whitespace-separated, non-empty tokens.

    This is the one definition of a chapter's word count; project totals are
    sums of it.
    """
    if not text:
        return 0
    return len([token for token in _WHITESPACE_RE.split(text.strip()) if token])


def split_sentences(text: str, min_length: int = 0) -> list[str]:
    """Split text on sentence-ending punctuation.

    Sentences are returned untrimmed so callers can locate them in the
    original text; ``min_length`` filters on the trimmed length.
    """
    if not text:
        return []
    return [s for s in _SENTENCE_END_RE.split(text) if len(s.strip()) > min_length]


def excerpt(text: str, limit: int = 500) -> str:
    """Return the first ``limit`` characters, marking truncation."""
    if not text:
        return ""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def get_chapter_ending(content: str, char_limit: int = 500) -> str:
    """Extract the ending portion of a chapter for continuity prompts."""
    if not content:
        return ""
    if len(content) <= char_limit:
        return content
    return content[-char_limit:]


def similarity(a: str, b: str, score_cutoff: Optional[float] = None) -> float:
    """Normalized Levenshtein similarity in [0, 1]: 1 - distance / length of the longer string.

    Scores below ``score_cutoff`` come back as 0.
    """
    return Levenshtein.normalized_similarity(a, b, score_cutoff=score_cutoff)
