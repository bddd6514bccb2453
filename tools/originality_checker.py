"""Heuristic originality checks: stock phrases and repeated sentences."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from config.settings import Settings
from models.enums import PlagiarismStatus
from tools.text_utils import similarity, split_sentences

logger = logging.getLogger(__name__)

# Well-known openings and closings that read as lifted text
_STOCK_PHRASES = [
    "it was a dark and stormy night",
    "once upon a time",
    "they lived happily ever after",
    "it was the best of times, it was the worst of times",
    "call me ishmael",
    "it is a truth universally acknowledged",
]
_STOCK_PHRASE_SIMILARITY = 0.9

_ALTERNATIVES = {
    "dark and stormy night": ["tempestuous evening", "turbulent nightfall", "wild, rain-soaked darkness"],
    "once upon a time": ["In a distant era", "Long ago", "In times past"],
    "happily ever after": ["found lasting joy", "discovered enduring happiness", "built a fulfilling life together"],
}

# Sentences shorter than this are too generic to count as repeats
_MIN_SENTENCE_CHARS = 10


@dataclass
class PlagiarismMatch:
    """A span of checked text that resembles known or repeated content."""
    text: str
    source: str
    similarity: float
    start_index: int
    end_index: int


@dataclass
class PlagiarismCheck:
    id: str
    content: str
    status: PlagiarismStatus = PlagiarismStatus.CHECKING
    confidence: float = 0.0
    matches: list[PlagiarismMatch] = field(default_factory=list)


@dataclass
class OriginalityResult:
    is_original: bool
    confidence: float
    suggestions: list[str] = field(default_factory=list)
    matches: list[PlagiarismMatch] = field(default_factory=list)


def find_stock_phrases(content: str) -> list[PlagiarismMatch]:
    lowered = content.lower()
    matches = []
    for phrase in _STOCK_PHRASES:
        index = lowered.find(phrase)
        if index != -1:
            matches.append(PlagiarismMatch(
                text=phrase,
                source="Common literary phrases",
                similarity=_STOCK_PHRASE_SIMILARITY,
                start_index=index,
                end_index=index + len(phrase),
            ))
    return matches


def find_repeated_sentences(content: str, threshold: float) -> list[PlagiarismMatch]:
    """Flag sentence pairs whose edit-distance similarity exceeds ``threshold``.

    Pairwise, so quadratic in the number of sentences.
    """
    sentences = split_sentences(content, min_length=_MIN_SENTENCE_CHARS)
    trimmed = [s.strip() for s in sentences]
    matches = []
    for i in range(len(trimmed) - 1):
        for j in range(i + 1, len(trimmed)):
            score = similarity(trimmed[i], trimmed[j], score_cutoff=threshold)
            if score > threshold:
                start = content.find(sentences[i])
                matches.append(PlagiarismMatch(
                    text=trimmed[i],
                    source="Repeated content within document",
                    similarity=score,
                    start_index=start,
                    end_index=start + len(sentences[i]),
                ))
    return matches


def confidence_from_matches(matches: list[PlagiarismMatch]) -> float:
    """1.0 for no matches, otherwise 1 - mean similarity (floored at 0)."""
    if not matches:
        return 1.0
    average = sum(m.similarity for m in matches) / len(matches)
    return max(0.0, 1.0 - average)


class OriginalityChecker:
    """Scores text for stock phrases and internal repetition.

    A stand-in for a real plagiarism service: it never looks outside the
    checked text except for a fixed phrase table.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def _run_checks(self, content: str) -> list[PlagiarismMatch]:
        matches = find_stock_phrases(content)
        matches.extend(find_repeated_sentences(content, self.settings.repeated_sentence_similarity))
        return matches

    async def check_plagiarism(self, content: str, check_id: str) -> PlagiarismCheck:
        """Check ``content`` and return a verdict; never raises.

        The pairwise sentence comparison runs in a worker thread so long
        chapters do not stall the event loop.
        """
        check = PlagiarismCheck(id=check_id, content=content)
        try:
            matches = await asyncio.to_thread(self._run_checks, content)
        except Exception:
            logger.exception("Plagiarism check %s failed", check_id)
            check.status = PlagiarismStatus.ERROR
            return check

        check.matches = matches
        check.status = PlagiarismStatus.POTENTIAL_ISSUES if matches else PlagiarismStatus.CLEAN
        check.confidence = confidence_from_matches(matches)
        logger.debug(
            "Plagiarism check %s: status=%s, matches=%d, confidence=%.2f",
            check_id, check.status.value, len(matches), check.confidence,
        )
        return check

    async def check_originality(self, content: str) -> OriginalityResult:
        """Pass/fail verdict: original iff confidence clears the threshold and nothing matched."""
        check = await self.check_plagiarism(content, "originality-check")

        suggestions = []
        if check.matches:
            suggestions.append("Consider rephrasing highlighted sections to improve originality")
            suggestions.append("Remove or modify common phrases and cliches")
            suggestions.append("Ensure all content is written in your unique voice")
        if check.confidence < self.settings.originality_threshold:
            suggestions.append("Review content for potential similarities to existing works")
            suggestions.append("Add more unique elements and creative descriptions")

        return OriginalityResult(
            is_original=check.confidence > self.settings.originality_threshold and not check.matches,
            confidence=check.confidence,
            suggestions=suggestions,
            matches=check.matches,
        )

    def suggest_alternatives(self, flagged_text: str) -> list[str]:
        lowered = flagged_text.lower()
        alternatives = []
        for original, options in _ALTERNATIVES.items():
            if original in lowered:
                alternatives.extend(options)
        return alternatives
