"""Series continuity checks and arc typing.

All functions here are pure: they read a series snapshot and return new
notes. The series orchestrator decides what to do with them.
"""

import logging
import math
from typing import Callable, Iterable

from models.enums import AppearanceRole, ArcType, ContinuityArea, ContinuityStatus, PlotThreadStatus
from models.series import BookSeries, ContinuityNote

logger = logging.getLogger(__name__)

DEFAULT_FOCUS_AREAS = (
    ContinuityArea.PLOT,
    ContinuityArea.CHARACTER,
    ContinuityArea.WORLD,
    ContinuityArea.TIMELINE,
)

# Fraction of the series at which the climax book falls
_CLIMAX_POSITION = 0.75


def determine_arc_type(book_number: int, total_books: int) -> ArcType:
    """Arc role of one book; earlier rules win when several apply."""
    if book_number == 1:
        return ArcType.INTRODUCTION
    if book_number == total_books:
        return ArcType.RESOLUTION
    if book_number == math.ceil(total_books * _CLIMAX_POSITION):
        return ArcType.CLIMAX
    return ArcType.DEVELOPMENT


def check_characters(series: BookSeries) -> list[ContinuityNote]:
    """Flag appearances whose role departs from the character's baseline role.

    Cameos are exempt.
    """
    notes = []
    for character in series.series_characters:
        for appearance in character.appearances:
            if appearance.role == AppearanceRole.CAMEO:
                continue
            if appearance.role.value == character.role.value:
                continue
            notes.append(ContinuityNote(
                type=ContinuityArea.CHARACTER,
                title=f"Role inconsistency for {character.name}",
                description=(
                    f"Character role changes from {character.role.value} to "
                    f"{appearance.role.value} in book {appearance.book_number}"
                ),
                established_in_book=1,
                referenced_in_books=[appearance.book_number],
                status=ContinuityStatus.NEEDS_REVIEW,
            ))
    return notes


def check_world(series: BookSeries) -> list[ContinuityNote]:
    """Flag pairs of world rules in the same category with different text."""
    notes = []
    rules = series.world_bible.rules
    for i in range(len(rules) - 1):
        for j in range(i + 1, len(rules)):
            first, second = rules[i], rules[j]
            if first.category != second.category or first.rule == second.rule:
                continue
            notes.append(ContinuityNote(
                type=ContinuityArea.WORLD,
                title="Conflicting world rules",
                description=f'Rule "{first.rule}" conflicts with "{second.rule}"',
                established_in_book=first.established_in_book,
                referenced_in_books=[second.established_in_book],
                conflicts=[first.rule, second.rule],
                status=ContinuityStatus.CONFLICTED,
            ))
    return notes


def check_timeline(series: BookSeries) -> list[ContinuityNote]:
    """Flag adjacent events where an earlier consequence reappears in the later description.

    Events are compared in date order; the series timeline itself is not reordered.
    """
    notes = []
    events = sorted(series.series_timeline, key=lambda event: event.date)
    for current, following in zip(events, events[1:]):
        later = following.description.lower()
        echoed = [c for c in current.consequences if c and c.lower() in later]
        if not echoed:
            continue
        notes.append(ContinuityNote(
            type=ContinuityArea.TIMELINE,
            title="Timeline inconsistency",
            description=f'Event "{current.title}" consequences conflict with "{following.title}"',
            established_in_book=1,
            referenced_in_books=current.affected_books + following.affected_books,
            conflicts=echoed,
            status=ContinuityStatus.CONFLICTED,
        ))
    return notes


def check_plot(series: BookSeries) -> list[ContinuityNote]:
    """Flag threads introduced more than one book ago that never advanced."""
    notes = []
    for thread in series.plot_threads:
        if thread.status != PlotThreadStatus.INTRODUCED:
            continue
        if thread.introduced_in_book >= series.current_book_count - 1:
            continue
        notes.append(ContinuityNote(
            type=ContinuityArea.PLOT,
            title="Unresolved plot thread",
            description=(
                f'Plot thread "{thread.title}" introduced in book '
                f"{thread.introduced_in_book} remains unresolved"
            ),
            established_in_book=thread.introduced_in_book,
            referenced_in_books=[thread.introduced_in_book],
            status=ContinuityStatus.NEEDS_REVIEW,
        ))
    return notes


def check_technology(series: BookSeries) -> list[ContinuityNote]:
    """Flag technologies recorded more than once under one name with different descriptions."""
    notes = []
    seen = {}
    for entry in series.world_bible.technologies:
        key = entry.name.strip().lower()
        earlier = seen.get(key)
        if earlier is None:
            seen[key] = entry
            continue
        if earlier.description.strip() == entry.description.strip():
            continue
        notes.append(ContinuityNote(
            type=ContinuityArea.TECHNOLOGY,
            title=f"Conflicting descriptions of {entry.name}",
            description=(
                f'"{entry.name}" is described differently in book '
                f"{earlier.established_in_book} and book {entry.established_in_book}"
            ),
            established_in_book=earlier.established_in_book,
            referenced_in_books=[entry.established_in_book],
            conflicts=[earlier.description, entry.description],
            status=ContinuityStatus.CONFLICTED,
        ))
    return notes


CHECKS: dict[ContinuityArea, Callable[[BookSeries], list[ContinuityNote]]] = {
    ContinuityArea.PLOT: check_plot,
    ContinuityArea.CHARACTER: check_characters,
    ContinuityArea.WORLD: check_world,
    ContinuityArea.TIMELINE: check_timeline,
    ContinuityArea.TECHNOLOGY: check_technology,
}


def run_checks(series: BookSeries, areas: Iterable[ContinuityArea]) -> list[ContinuityNote]:
    """Run the checks for ``areas`` in order and concatenate their notes."""
    notes = []
    for area in areas:
        found = CHECKS[area](series)
        logger.debug("Continuity check %s: %d notes", area.value, len(found))
        notes.extend(found)
    return notes
