"""Book series, world bible and continuity data models."""

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from models.enums import (
    AppearanceRole,
    ArcType,
    CharacterRole,
    ContinuityArea,
    ContinuityStatus,
    PlotThreadStatus,
    ProjectType,
    SeriesStatus,
)
from models.project import Project, new_id


@dataclass
class CharacterArcNode:
    """One book-scoped waypoint of a character's cross-series arc."""
    book_number: int
    arc_type: ArcType
    chapter_range: str = ""
    description: str = ""
    emotional_state: str = ""
    goals: str = ""
    conflicts: str = ""


@dataclass
class BookAppearance:
    """Links a series character to one book and the role played there."""
    book_number: int
    role: AppearanceRole = AppearanceRole.SUPPORTING
    significance: str = ""


@dataclass
class SeriesCharacter:
    """A character whose arc spans several books."""
    id: str = field(default_factory=new_id)
    name: str = ""
    description: str = ""
    role: CharacterRole = CharacterRole.SUPPORTING
    personality: str = ""
    background: str = ""
    goals: str = ""
    conflicts: str = ""
    arc: list[CharacterArcNode] = field(default_factory=list)
    appearances: list[BookAppearance] = field(default_factory=list)


@dataclass
class WorldEntry:
    """A world-building element: a location, culture, technology, ..."""
    name: str = ""
    description: str = ""
    established_in_book: int = 1
    details: dict = field(default_factory=dict)


@dataclass
class WorldRule:
    """A rule of the invented world, e.g. how magic or travel works."""
    id: str = field(default_factory=new_id)
    category: str = ""
    rule: str = ""
    established_in_book: int = 1
    exceptions: list[str] = field(default_factory=list)


@dataclass
class WorldBible:
    """Structured store of a series' setting facts. Lists only grow."""
    series_id: str
    id: str = field(default_factory=new_id)
    locations: list[WorldEntry] = field(default_factory=list)
    cultures: list[WorldEntry] = field(default_factory=list)
    technologies: list[WorldEntry] = field(default_factory=list)
    magic_systems: list[WorldEntry] = field(default_factory=list)
    political_systems: list[WorldEntry] = field(default_factory=list)
    religions: list[WorldEntry] = field(default_factory=list)
    languages: list[WorldEntry] = field(default_factory=list)
    timeline: list[WorldEntry] = field(default_factory=list)
    rules: list[WorldRule] = field(default_factory=list)


@dataclass
class SeriesTimelineEvent:
    """An in-world event placed on the series timeline."""
    id: str = field(default_factory=new_id)
    title: str = ""
    description: str = ""
    date: dt.date = field(default_factory=dt.date.today)
    affected_books: list[int] = field(default_factory=list)
    consequences: list[str] = field(default_factory=list)
    importance: str = "minor"


@dataclass
class SeriesPlotThread:
    """A plot line spanning one or more books."""
    id: str = field(default_factory=new_id)
    title: str = ""
    description: str = ""
    status: PlotThreadStatus = PlotThreadStatus.INTRODUCED
    introduced_in_book: int = 1
    resolved_in_book: Optional[int] = None
    books_involved: list[int] = field(default_factory=list)


@dataclass
class ContinuityNote:
    """A flagged inconsistency between facts established in different books."""
    type: ContinuityArea
    title: str
    description: str
    established_in_book: int
    referenced_in_books: list[int] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    status: ContinuityStatus = ContinuityStatus.NEEDS_REVIEW
    id: str = field(default_factory=new_id)


@dataclass
class SeriesOutline:
    """Parsed result of a whole-series outline generation."""
    series_overview: str = ""
    book_outlines: list[str] = field(default_factory=list)
    character_arcs: list[str] = field(default_factory=list)
    world_building: str = ""
    plot_threads: list[SeriesPlotThread] = field(default_factory=list)


@dataclass
class BookTransitionPlan:
    """Advisory guidance for moving the narrative from one book to the next."""
    from_book: int
    to_book: int
    cliffhangers: list[str] = field(default_factory=list)
    character_transitions: list[str] = field(default_factory=list)
    plot_advancement: list[str] = field(default_factory=list)
    world_progression: list[str] = field(default_factory=list)
    continuity_checks: list[str] = field(default_factory=list)


@dataclass
class SeriesAnalytics:
    series_id: str
    total_words: int
    average_book_length: float
    characters_introduced: int
    plot_threads_active: int
    plot_threads_resolved: int
    world_locations: int
    timeline_events: int
    continuity_issues: int
    completion_percentage: float
    estimated_series_completion: dt.datetime
    writing_velocity: float


@dataclass
class BookSeries:
    """A multi-book series. It owns its books exclusively.

    current_book_count always equals len(books).
    """
    id: str = field(default_factory=new_id)
    title: str = ""
    description: str = ""
    genre: str = ""
    type: ProjectType = ProjectType.FICTION
    status: SeriesStatus = SeriesStatus.PLANNING
    total_planned_books: int = 3
    current_book_count: int = 0
    overall_themes: list[str] = field(default_factory=list)
    outline: str = ""
    world_bible: Optional[WorldBible] = None
    series_timeline: list[SeriesTimelineEvent] = field(default_factory=list)
    books: list[Project] = field(default_factory=list)
    series_characters: list[SeriesCharacter] = field(default_factory=list)
    plot_threads: list[SeriesPlotThread] = field(default_factory=list)
    continuity_notes: list[ContinuityNote] = field(default_factory=list)
    created_at: dt.datetime = field(default_factory=dt.datetime.now)
    updated_at: dt.datetime = field(default_factory=dt.datetime.now)

    def __post_init__(self):
        if self.world_bible is None:
            self.world_bible = WorldBible(series_id=self.id)

    def find_character(self, character_id: str) -> Optional[SeriesCharacter]:
        for character in self.series_characters:
            if character.id == character_id:
                return character
        return None

    def find_plot_thread(self, thread_id: str) -> Optional[SeriesPlotThread]:
        for thread in self.plot_threads:
            if thread.id == thread_id:
                return thread
        return None

    def add_book(self, book: Project) -> None:
        self.books.append(book)
        self.current_book_count = len(self.books)

    def remove_book(self, project_id: str) -> bool:
        remaining = [book for book in self.books if book.id != project_id]
        removed = len(remaining) != len(self.books)
        self.books = remaining
        self.current_book_count = len(self.books)
        return removed
