"""Series analytics: a pure snapshot computed from series state."""

import math
from datetime import datetime, timedelta
from typing import Optional

from config.settings import Settings
from models.enums import ContinuityStatus, PlotThreadStatus
from models.series import BookSeries, SeriesAnalytics

_ACTIVE_THREADS = (PlotThreadStatus.INTRODUCED, PlotThreadStatus.DEVELOPING)
_OPEN_NOTES = (ContinuityStatus.CONFLICTED, ContinuityStatus.NEEDS_REVIEW)

_SECONDS_PER_DAY = 86400


def days_since(start: datetime, now: datetime) -> int:
    """Whole days elapsed, rounded up, never less than one."""
    elapsed = (now - start).total_seconds() / _SECONDS_PER_DAY
    return max(1, math.ceil(elapsed))


def generate_series_analytics(
    series: BookSeries,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> SeriesAnalytics:
    """Compute analytics for ``series`` as of ``now``.

    Velocity is words per day since the series was created. With nothing
    written yet the completion estimate uses the assumed daily word rate.
    """
    settings = settings or Settings()
    now = now or datetime.now()

    total_words = sum(book.current_word_count for book in series.books)
    average = total_words / len(series.books) if series.books else 0
    velocity = total_words / days_since(series.created_at, now)

    remaining_books = max(0, series.total_planned_books - series.current_book_count)
    remaining_words = remaining_books * settings.words_per_book_estimate
    rate = velocity if velocity > 0 else settings.assumed_daily_word_rate
    estimated = now + timedelta(days=math.ceil(remaining_words / rate))

    return SeriesAnalytics(
        series_id=series.id,
        total_words=total_words,
        average_book_length=average,
        characters_introduced=len(series.series_characters),
        plot_threads_active=sum(1 for t in series.plot_threads if t.status in _ACTIVE_THREADS),
        plot_threads_resolved=sum(1 for t in series.plot_threads if t.status == PlotThreadStatus.RESOLVED),
        world_locations=len(series.world_bible.locations),
        timeline_events=len(series.series_timeline),
        continuity_issues=sum(1 for n in series.continuity_notes if n.status in _OPEN_NOTES),
        completion_percentage=100 * series.current_book_count / series.total_planned_books,
        estimated_series_completion=estimated,
        writing_velocity=velocity,
    )
