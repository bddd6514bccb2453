"""Series orchestrator: multi-book planning, world-building and continuity.

Shares the store and task ledger of a ProjectOrchestrator, which it uses
to create and delete the books a series owns. Lock order is always the
series first, then a book.
"""

import copy
import datetime as dt
import logging
import math
from typing import Any, Iterable, Mapping, Optional

from config.exceptions import GenerationError, NotConfiguredError, NotFoundError, ValidationError
from config.settings import Settings
from models.enums import (
    AppearanceRole,
    CharacterRole,
    ContinuityArea,
    PlotThreadStatus,
    ProjectType,
    SeriesStatus,
    TaskType,
    WorldBibleCategory,
)
from models.project import Project, new_id
from models.series import (
    BookAppearance,
    BookSeries,
    BookTransitionPlan,
    CharacterArcNode,
    ContinuityNote,
    SeriesAnalytics,
    SeriesCharacter,
    SeriesPlotThread,
    SeriesTimelineEvent,
    WorldBible,
    WorldRule,
)
from models.task import (
    CharacterArcTaskInput,
    ContinuityTaskInput,
    SeriesOutlineTaskInput,
    WorldBibleTaskInput,
)
from models.writing_settings import as_writing_settings
from workflow.analytics import generate_series_analytics
from workflow.continuity import DEFAULT_FOCUS_AREAS, determine_arc_type, run_checks
from workflow.project_orchestrator import (
    DEFAULT_CHARACTER_NAME,
    DEFAULT_GENRE,
    ProjectOrchestrator,
    coerce_enum,
    guarded,
    require_content,
)

logger = logging.getLogger(__name__)

DEFAULT_SERIES_TITLE = "Untitled Series"

_CHARACTER_TEXT_FIELDS = ("description", "personality", "background", "goals", "conflicts")


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer", {name: value})
    return value


def _parse_date(value) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value)
        except ValueError as e:
            raise ValidationError("date must be an ISO date", {"date": value}) from e
    raise ValidationError("date is required", {"date": value})


class SeriesOrchestrator:
    """Owns book series: their books, cast, world bible and continuity ledger."""

    def __init__(
        self,
        projects: ProjectOrchestrator,
        generator,
        settings: Optional[Settings] = None,
    ):
        if not generator.is_configured:
            raise NotConfiguredError("Content generator credential is not configured")
        self.projects = projects
        self.generator = generator
        self.settings = settings or projects.settings
        self.store = projects.store
        self.ledger = projects.ledger

    def _require_series(self, series_id: str) -> BookSeries:
        series = self.store.get_series(series_id)
        if series is None:
            raise NotFoundError("series", series_id)
        return series

    # ---- Series CRUD ----

    def create_book_series(
        self,
        *,
        title: str = "",
        description: str = "",
        genre: str = "",
        series_type="fiction",
        total_planned_books: Optional[int] = None,
        overall_themes: Optional[list[str]] = None,
    ) -> BookSeries:
        """Create a series with an empty world bible.

        Raises:
            ValidationError: Fewer planned books than the configured minimum.
        """
        if total_planned_books is None:
            total_planned_books = self.settings.default_planned_books
        _positive_int(total_planned_books, "total_planned_books")
        if total_planned_books < self.settings.min_planned_books:
            raise ValidationError(
                f"A series needs at least {self.settings.min_planned_books} planned books",
                {"total_planned_books": total_planned_books},
            )
        series = BookSeries(
            title=title or DEFAULT_SERIES_TITLE,
            description=description,
            genre=genre or DEFAULT_GENRE,
            type=coerce_enum(ProjectType, series_type or ProjectType.FICTION, "series_type"),
            total_planned_books=total_planned_books,
            overall_themes=list(overall_themes or []),
        )
        self.store.add_series(series)
        logger.info("Created series %s ('%s', %d books planned)", series.id, series.title, total_planned_books)
        return copy.deepcopy(series)

    def get_series(self, series_id: str) -> BookSeries:
        return copy.deepcopy(self._require_series(series_id))

    def list_series(self) -> list[BookSeries]:
        return copy.deepcopy(self.store.list_series())

    async def update_series_status(self, series_id: str, status) -> BookSeries:
        status = coerce_enum(SeriesStatus, status, "status")
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            series.status = status
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(series)

    async def delete_series(self, series_id: str) -> bool:
        """Delete a series, every book it owns, and all their tasks."""
        if self.store.get_series(series_id) is None:
            return False
        async with self.store.lock(series_id):
            series = self.store.get_series(series_id)
            if series is None:
                return False
            for book in list(series.books):
                await self.projects.delete_owned_project(book.id)
            self.store.remove_series(series_id)
            removed_tasks = self.ledger.delete_all_for(series_id)
        self.store.drop_lock(series_id)
        logger.info("Deleted series %s (%d books, %d series tasks)", series_id, len(series.books), removed_tasks)
        return True

    # ---- Books ----

    async def add_book_to_series(self, series_id: str, **project_fields) -> Project:
        """Create a project as the next book; genre and type default to the series'."""
        project_fields.pop("series_id", None)
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            project_fields.setdefault("genre", series.genre)
            project_fields.setdefault("project_type", series.type)
            if not project_fields.get("title"):
                project_fields["title"] = f"{series.title}: Book {series.current_book_count + 1}"
            created = self.projects.create_project(series_id=series_id, **project_fields)
            book = self.store.get_project(created.id)
            series.add_book(book)
            series.updated_at = dt.datetime.now()
        logger.info("Added book %s to series %s (%d books)", book.id, series_id, series.current_book_count)
        return created

    async def remove_book_from_series(self, series_id: str, project_id: str) -> bool:
        """Delete one book (with its tasks) and detach it from the series."""
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            if not any(book.id == project_id for book in series.books):
                return False
            await self.projects.delete_owned_project(project_id)
            series.remove_book(project_id)
            series.updated_at = dt.datetime.now()
            return True

    # ---- Cast and world maintenance ----

    async def add_series_character(self, series_id: str, character_data: Mapping[str, Any]) -> SeriesCharacter:
        """Add or replace (by id) a series character."""
        role = coerce_enum(
            CharacterRole, character_data.get("role") or CharacterRole.SUPPORTING, "role"
        )
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            character = SeriesCharacter(
                id=character_data.get("id") or new_id(),
                name=character_data.get("name") or DEFAULT_CHARACTER_NAME,
                role=role,
                **{name: character_data.get(name, "") for name in _CHARACTER_TEXT_FIELDS},
            )
            existing = series.find_character(character.id)
            if existing is not None:
                character.arc = existing.arc
                character.appearances = existing.appearances
                series.series_characters[series.series_characters.index(existing)] = character
            else:
                series.series_characters.append(character)
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(character)

    async def record_book_appearance(
        self,
        series_id: str,
        character_id: str,
        book_number: int,
        role="supporting",
        significance: str = "",
    ) -> SeriesCharacter:
        """Record (or replace) the role a character plays in one book."""
        _positive_int(book_number, "book_number")
        role = coerce_enum(AppearanceRole, role, "role")
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            character = series.find_character(character_id)
            if character is None:
                raise NotFoundError("character", character_id)
            character.appearances = [a for a in character.appearances if a.book_number != book_number]
            character.appearances.append(BookAppearance(book_number, role, significance))
            character.appearances.sort(key=lambda a: a.book_number)
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(character)

    async def add_world_rule(
        self,
        series_id: str,
        category: str,
        rule: str,
        established_in_book: int = 1,
        exceptions: Optional[list[str]] = None,
    ) -> WorldRule:
        if not category or not rule:
            raise ValidationError("category and rule are required")
        _positive_int(established_in_book, "established_in_book")
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            world_rule = WorldRule(
                category=category,
                rule=rule,
                established_in_book=established_in_book,
                exceptions=list(exceptions or []),
            )
            series.world_bible.rules.append(world_rule)
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(world_rule)

    async def add_timeline_event(self, series_id: str, event_data: Mapping[str, Any]) -> SeriesTimelineEvent:
        """Append an event; ``date`` may be a date or an ISO string."""
        if not event_data.get("title"):
            raise ValidationError("title is required")
        event = SeriesTimelineEvent(
            title=event_data["title"],
            description=event_data.get("description", ""),
            date=_parse_date(event_data.get("date")),
            affected_books=list(event_data.get("affected_books") or []),
            consequences=list(event_data.get("consequences") or []),
            importance=event_data.get("importance") or "minor",
        )
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            series.series_timeline.append(event)
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(event)

    async def add_plot_thread(self, series_id: str, thread_data: Mapping[str, Any]) -> SeriesPlotThread:
        if not thread_data.get("title"):
            raise ValidationError("title is required")
        introduced = _positive_int(thread_data.get("introduced_in_book", 1), "introduced_in_book")
        thread = SeriesPlotThread(
            title=thread_data["title"],
            description=thread_data.get("description", ""),
            status=coerce_enum(PlotThreadStatus, thread_data.get("status") or PlotThreadStatus.INTRODUCED, "status"),
            introduced_in_book=introduced,
            books_involved=list(thread_data.get("books_involved") or [introduced]),
        )
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            series.plot_threads.append(thread)
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(thread)

    async def update_plot_thread_status(
        self,
        series_id: str,
        thread_id: str,
        status,
        resolved_in_book: Optional[int] = None,
    ) -> SeriesPlotThread:
        status = coerce_enum(PlotThreadStatus, status, "status")
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            thread = series.find_plot_thread(thread_id)
            if thread is None:
                raise NotFoundError("plot thread", thread_id)
            thread.status = status
            if status == PlotThreadStatus.RESOLVED:
                thread.resolved_in_book = resolved_in_book or series.current_book_count or None
            else:
                thread.resolved_in_book = None
            series.updated_at = dt.datetime.now()
            return copy.deepcopy(thread)

    # ---- Authoring ----

    async def generate_series_outline(self, series_id: str, settings=None) -> dict:
        """Generate the whole-series outline in one generator call.

        The overview is stored on the series; any plot threads it proposes
        replace the series' plot threads. No originality gate applies.

        Returns:
            Dict with keys: task_id, outline (a SeriesOutline).
        """
        writing = as_writing_settings(settings)
        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            task = self.ledger.create(TaskType.GENERATE_OUTLINE, SeriesOutlineTaskInput(series_id, writing))
            with self.ledger.running(task):
                outline = await guarded(
                    self.generator.generate_series_outline(copy.deepcopy(series), writing),
                    "Series outline generation",
                )
                if outline is None or not (outline.series_overview or outline.book_outlines):
                    raise GenerationError("Series outline generation returned no content")

                series.outline = outline.series_overview
                if outline.plot_threads:
                    series.plot_threads = copy.deepcopy(outline.plot_threads)
                series.updated_at = dt.datetime.now()
                self.ledger.complete(task, {"outline": copy.deepcopy(outline)})

        return {"task_id": task.id, "outline": copy.deepcopy(outline)}

    async def develop_series_character_arc(
        self, series_id: str, character_id: str, settings=None
    ) -> list[CharacterArcNode]:
        """Generate one arc node per planned book; the nodes replace the character's arc."""
        writing = as_writing_settings(settings)
        chapters = math.ceil(self.settings.words_per_book_estimate / self.settings.words_per_chapter_estimate)

        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            character = series.find_character(character_id)
            if character is None:
                raise NotFoundError("character", character_id)

            task = self.ledger.create(
                TaskType.DEVELOP_CHARACTER_ARC, CharacterArcTaskInput(series_id, character_id, writing)
            )
            with self.ledger.running(task):
                series_view = copy.deepcopy(series)
                character_view = copy.deepcopy(character)
                nodes = []
                for book_number in range(1, series.total_planned_books + 1):
                    arc_type = determine_arc_type(book_number, series.total_planned_books)
                    data = require_content(
                        await guarded(
                            self.generator.develop_book_arc(
                                character_view, series_view, book_number, arc_type, writing
                            ),
                            "Character arc generation",
                        ),
                        "Character arc generation",
                    )
                    nodes.append(CharacterArcNode(
                        book_number=book_number,
                        arc_type=arc_type,
                        chapter_range=f"1-{chapters}",
                        description=data.get("description", ""),
                        emotional_state=data.get("emotional_state", ""),
                        goals=data.get("goals", ""),
                        conflicts=data.get("conflicts", ""),
                    ))

                character.arc = nodes
                series.updated_at = dt.datetime.now()
                self.ledger.complete(task, {"arc": copy.deepcopy(nodes)})

        logger.info("Arc for '%s' developed across %d books", character.name, len(nodes))
        return copy.deepcopy(nodes)

    async def check_series_continuity(
        self, series_id: str, focus_areas: Optional[Iterable] = None
    ) -> list[ContinuityNote]:
        """Run continuity checks and replace the series' notes with the result.

        Areas run in the order given; duplicates are ignored.
        """
        if focus_areas is None:
            areas = list(DEFAULT_FOCUS_AREAS)
        else:
            areas = [coerce_enum(ContinuityArea, area, "focus_area") for area in focus_areas]
            areas = list(dict.fromkeys(areas))

        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            task = self.ledger.create(
                TaskType.CHECK_CONTINUITY,
                ContinuityTaskInput(series_id, tuple(area.value for area in areas)),
            )
            with self.ledger.running(task):
                notes = run_checks(series, areas)
                series.continuity_notes = notes
                series.updated_at = dt.datetime.now()
                self.ledger.complete(task, {"notes": copy.deepcopy(notes)})

        logger.info("Continuity check for series %s: %d notes", series_id, len(notes))
        return copy.deepcopy(notes)

    async def expand_world_bible(self, series_id: str, categories: Iterable, settings=None) -> WorldBible:
        """Ask the generator for new entries in each category and append them.

        A failing category is logged and skipped; the others still run.
        The task output records per-category additions and failures.
        """
        categories = [coerce_enum(WorldBibleCategory, c, "category") for c in categories]
        if not categories:
            raise ValidationError("At least one world bible category is required")
        categories = list(dict.fromkeys(categories))
        writing = as_writing_settings(settings)

        async with self.store.lock(series_id):
            series = self._require_series(series_id)
            task = self.ledger.create(
                TaskType.EXPAND_WORLD_BIBLE,
                WorldBibleTaskInput(series_id, tuple(c.value for c in categories), writing),
            )
            with self.ledger.running(task):
                additions: dict[str, int] = {}
                failures: dict[str, str] = {}
                for category in categories:
                    try:
                        entries = await guarded(
                            self.generator.expand_world_category(category, copy.deepcopy(series), writing),
                            f"World bible expansion ({category.value})",
                        )
                        if entries is None:
                            raise GenerationError(f"World bible expansion ({category.value}) returned no content")
                    except Exception as e:
                        logger.exception("World bible expansion failed for %s in series %s", category.value, series_id)
                        failures[category.value] = str(e)
                        continue
                    getattr(series.world_bible, category.value).extend(entries)
                    additions[category.value] = len(entries)

                series.updated_at = dt.datetime.now()
                self.ledger.complete(task, {"additions": additions, "failures": failures})

        return copy.deepcopy(series.world_bible)

    async def plan_book_transition(
        self, series_id: str, from_book: int, to_book: int, settings=None
    ) -> BookTransitionPlan:
        """Advisory plan for handing the story from one book to another; nothing is stored."""
        series = self.get_series(series_id)
        for name, number in (("from_book", from_book), ("to_book", to_book)):
            _positive_int(number, name)
            if number > series.total_planned_books:
                raise ValidationError(
                    f"{name} is beyond the planned books",
                    {name: number, "total_planned_books": series.total_planned_books},
                )
        if from_book == to_book:
            raise ValidationError("from_book and to_book must differ")

        writing = as_writing_settings(settings)
        return require_content(
            await guarded(
                self.generator.plan_book_transition(series, from_book, to_book, writing),
                "Transition planning",
            ),
            "Transition planning",
        )

    # ---- Analytics ----

    def get_series_analytics(self, series_id: str, now: Optional[dt.datetime] = None) -> SeriesAnalytics:
        return generate_series_analytics(self._require_series(series_id), self.settings, now)
