"""Tests for SeriesOrchestrator: books, cast, world bible, continuity and analytics."""

import datetime as dt
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.exceptions import GenerationError, NotConfiguredError, NotFoundError, ValidationError
from models.enums import (
    AppearanceRole,
    ArcType,
    ContinuityArea,
    ContinuityStatus,
    PlotThreadStatus,
    ProjectType,
    SeriesStatus,
    TaskStatus,
    TaskType,
    WorldBibleCategory,
)
from models.series import SeriesOutline, WorldEntry


def _words(n: int) -> str:
    return " ".join(["word"] * n)


class TestSeriesCrud:
    def test_unconfigured_generator_rejected(self, projects, settings):
        from workflow.series_orchestrator import SeriesOrchestrator
        generator = MagicMock()
        generator.is_configured = False
        with pytest.raises(NotConfiguredError):
            SeriesOrchestrator(projects, generator, settings=settings)

    def test_create_defaults(self, series_orch):
        series = series_orch.create_book_series()
        assert series.title == "Untitled Series"
        assert series.total_planned_books == 3
        assert series.status == SeriesStatus.PLANNING
        assert series.current_book_count == 0
        assert series.world_bible.series_id == series.id
        assert series.world_bible.locations == []

    @pytest.mark.parametrize("planned", [1, 0, -2, "3"])
    def test_too_few_planned_books_rejected(self, series_orch, planned):
        with pytest.raises(ValidationError):
            series_orch.create_book_series(total_planned_books=planned)
        assert series_orch.list_series() == []

    def test_get_unknown_series(self, series_orch):
        with pytest.raises(NotFoundError):
            series_orch.get_series("missing")

    @pytest.mark.asyncio
    async def test_update_status(self, series_orch):
        series = series_orch.create_book_series()
        updated = await series_orch.update_series_status(series.id, "publishing")
        assert updated.status == SeriesStatus.PUBLISHING

    @pytest.mark.asyncio
    async def test_delete_series_cascades(self, series_orch, projects):
        series = series_orch.create_book_series(total_planned_books=2)
        first = await series_orch.add_book_to_series(series.id)
        second = await series_orch.add_book_to_series(series.id)
        standalone = projects.create_project(title="Standalone")
        await projects.write_chapter(first.id)
        await projects.generate_project_outline(second.id)
        await projects.generate_project_outline(standalone.id)
        await series_orch.generate_series_outline(series.id)

        assert await series_orch.delete_series(series.id) is True

        with pytest.raises(NotFoundError):
            series_orch.get_series(series.id)
        for book in (first, second):
            with pytest.raises(NotFoundError):
                projects.get_project(book.id)
        remaining = projects.list_tasks()
        assert len(remaining) == 1
        assert remaining[0].references(standalone.id)
        assert [p.id for p in projects.list_projects()] == [standalone.id]
        assert await series_orch.delete_series(series.id) is False

    @pytest.mark.asyncio
    async def test_unknown_ids_leave_no_locks(self, series_orch):
        for i in range(50):
            with pytest.raises(NotFoundError):
                await series_orch.update_series_status(f"missing-{i}", "publishing")
            with pytest.raises(NotFoundError):
                await series_orch.add_book_to_series(f"missing-{i}")
        assert series_orch.store._locks == {}


class TestBooks:
    @pytest.mark.asyncio
    async def test_add_book_inherits_series_fields(self, series_orch):
        series = series_orch.create_book_series(title="The Drowned Crown", genre="Fantasy", series_type="nonfiction")
        book = await series_orch.add_book_to_series(series.id)
        assert book.title == "The Drowned Crown: Book 1"
        assert book.genre == "Fantasy"
        assert book.type == ProjectType.NONFICTION
        assert book.series_id == series.id
        stored = series_orch.get_series(series.id)
        assert stored.current_book_count == 1
        assert [b.id for b in stored.books] == [book.id]

    @pytest.mark.asyncio
    async def test_add_book_with_own_fields(self, series_orch):
        series = series_orch.create_book_series(genre="Fantasy")
        book = await series_orch.add_book_to_series(series.id, title="Low Tide", genre="Horror", target_word_count=5000)
        assert book.title == "Low Tide"
        assert book.genre == "Horror"
        assert book.target_word_count == 5000

    @pytest.mark.asyncio
    async def test_book_view_tracks_chapter_writes(self, series_orch, projects):
        series = series_orch.create_book_series()
        book = await series_orch.add_book_to_series(series.id)
        await projects.write_chapter(book.id)
        assert series_orch.get_series(series.id).books[0].current_word_count == 10

    @pytest.mark.asyncio
    async def test_remove_book(self, series_orch, projects):
        series = series_orch.create_book_series()
        book = await series_orch.add_book_to_series(series.id)
        assert await series_orch.remove_book_from_series(series.id, book.id) is True
        assert series_orch.get_series(series.id).current_book_count == 0
        with pytest.raises(NotFoundError):
            projects.get_project(book.id)
        assert await series_orch.remove_book_from_series(series.id, book.id) is False

    @pytest.mark.asyncio
    async def test_deleting_book_project_detaches_it(self, series_orch, projects):
        series = series_orch.create_book_series()
        book = await series_orch.add_book_to_series(series.id)
        await series_orch.add_book_to_series(series.id)
        assert await projects.delete_project(book.id) is True
        stored = series_orch.get_series(series.id)
        assert stored.current_book_count == 1
        assert book.id not in [b.id for b in stored.books]

    @pytest.mark.asyncio
    async def test_add_book_to_unknown_series(self, series_orch, projects):
        with pytest.raises(NotFoundError):
            await series_orch.add_book_to_series("missing")
        assert projects.list_projects() == []


class TestCastAndWorld:
    @pytest.mark.asyncio
    async def test_character_upsert_keeps_arc_and_appearances(self, series_orch):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey", "role": "protagonist"})
        await series_orch.record_book_appearance(series.id, vey.id, 2, "supporting")
        updated = await series_orch.add_series_character(series.id, {"id": vey.id, "name": "Vey Marrow", "role": "protagonist"})
        assert updated.name == "Vey Marrow"
        assert [a.book_number for a in updated.appearances] == [2]
        assert len(series_orch.get_series(series.id).series_characters) == 1

    @pytest.mark.asyncio
    async def test_record_appearance_replaces_same_book(self, series_orch):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey"})
        await series_orch.record_book_appearance(series.id, vey.id, 3, "minor")
        await series_orch.record_book_appearance(series.id, vey.id, 1, "protagonist")
        character = await series_orch.record_book_appearance(series.id, vey.id, 3, "cameo")
        assert [(a.book_number, a.role) for a in character.appearances] == [
            (1, AppearanceRole.PROTAGONIST), (3, AppearanceRole.CAMEO),
        ]

    @pytest.mark.asyncio
    async def test_record_appearance_unknown_character(self, series_orch):
        series = series_orch.create_book_series()
        with pytest.raises(NotFoundError):
            await series_orch.record_book_appearance(series.id, "missing", 1)

    @pytest.mark.asyncio
    async def test_timeline_event_accepts_iso_date(self, series_orch):
        series = series_orch.create_book_series()
        event = await series_orch.add_timeline_event(series.id, {"title": "The Flood", "date": "1204-03-01"})
        assert event.date == dt.date(1204, 3, 1)
        with pytest.raises(ValidationError):
            await series_orch.add_timeline_event(series.id, {"title": "Bad", "date": "spring"})

    @pytest.mark.asyncio
    async def test_plot_thread_status(self, series_orch):
        series = series_orch.create_book_series()
        await series_orch.add_book_to_series(series.id)
        thread = await series_orch.add_plot_thread(series.id, {"title": "The missing heir"})
        assert thread.books_involved == [1]
        resolved = await series_orch.update_plot_thread_status(series.id, thread.id, "resolved")
        assert resolved.status == PlotThreadStatus.RESOLVED
        assert resolved.resolved_in_book == 1
        with pytest.raises(NotFoundError):
            await series_orch.update_plot_thread_status(series.id, "missing", "developing")

    @pytest.mark.asyncio
    async def test_add_world_rule_validation(self, series_orch):
        series = series_orch.create_book_series()
        with pytest.raises(ValidationError):
            await series_orch.add_world_rule(series.id, "", "Magic costs memory")
        rule = await series_orch.add_world_rule(series.id, "magic", "Magic costs memory", 2)
        assert series_orch.get_series(series.id).world_bible.rules[0].id == rule.id


class TestSeriesOutline:
    @pytest.mark.asyncio
    async def test_outline_stored(self, series_orch):
        series = series_orch.create_book_series()
        result = await series_orch.generate_series_outline(series.id, {"model": "claude-haiku-4-5"})

        stored = series_orch.get_series(series.id)
        assert stored.outline == "Three books about a drowning empire."
        assert [t.title for t in stored.plot_threads] == ["The missing heir"]
        task = series_orch.projects.get_task(result["task_id"])
        assert task.type == TaskType.GENERATE_OUTLINE
        assert task.status == TaskStatus.COMPLETE
        assert task.references(series.id)
        assert len(result["outline"].book_outlines) == 3

    @pytest.mark.asyncio
    async def test_empty_outline_is_an_error(self, series_orch, fake_generator):
        series = series_orch.create_book_series()
        fake_generator.generate_series_outline.return_value = SeriesOutline()
        with pytest.raises(GenerationError):
            await series_orch.generate_series_outline(series.id)
        assert series_orch.get_series(series.id).outline == ""
        assert series_orch.projects.list_tasks(series.id)[0].status == TaskStatus.ERROR


class TestCharacterArc:
    @pytest.mark.asyncio
    async def test_five_book_arc_types(self, series_orch, fake_generator):
        series = series_orch.create_book_series(total_planned_books=5)
        vey = await series_orch.add_series_character(series.id, {"name": "Vey"})

        nodes = await series_orch.develop_series_character_arc(series.id, vey.id)

        assert [n.arc_type for n in nodes] == [
            ArcType.INTRODUCTION, ArcType.DEVELOPMENT, ArcType.DEVELOPMENT, ArcType.CLIMAX, ArcType.RESOLUTION,
        ]
        assert [n.book_number for n in nodes] == [1, 2, 3, 4, 5]
        assert nodes[0].chapter_range == "1-27"
        assert nodes[0].description == "Learns to lead"
        assert fake_generator.develop_book_arc.await_count == 5
        assert len(series_orch.get_series(series.id).find_character(vey.id).arc) == 5

    @pytest.mark.asyncio
    async def test_two_book_arc(self, series_orch):
        series = series_orch.create_book_series(total_planned_books=2)
        vey = await series_orch.add_series_character(series.id, {"name": "Vey"})
        nodes = await series_orch.develop_series_character_arc(series.id, vey.id)
        assert [n.arc_type for n in nodes] == [ArcType.INTRODUCTION, ArcType.RESOLUTION]

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_arc(self, series_orch, fake_generator):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey"})
        await series_orch.develop_series_character_arc(series.id, vey.id)
        fake_generator.develop_book_arc.side_effect = RuntimeError("timeout")

        with pytest.raises(GenerationError):
            await series_orch.develop_series_character_arc(series.id, vey.id)

        assert len(series_orch.get_series(series.id).find_character(vey.id).arc) == 3
        assert series_orch.projects.list_tasks(series.id)[-1].status == TaskStatus.ERROR

    @pytest.mark.asyncio
    async def test_unknown_character(self, series_orch):
        series = series_orch.create_book_series()
        with pytest.raises(NotFoundError):
            await series_orch.develop_series_character_arc(series.id, "missing")
        assert series_orch.projects.list_tasks() == []


class TestContinuity:
    @pytest.mark.asyncio
    async def test_notes_replace_previous_notes(self, series_orch):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey", "role": "protagonist"})
        await series_orch.record_book_appearance(series.id, vey.id, 2, "antagonist")
        await series_orch.record_book_appearance(series.id, vey.id, 3, "cameo")

        first = await series_orch.check_series_continuity(series.id)
        second = await series_orch.check_series_continuity(series.id)

        assert len(first) == 1
        assert first[0].type == ContinuityArea.CHARACTER
        assert len(second) == 1
        assert len(series_orch.get_series(series.id).continuity_notes) == 1

    @pytest.mark.asyncio
    async def test_focus_areas_limit_checks(self, series_orch):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey", "role": "protagonist"})
        await series_orch.record_book_appearance(series.id, vey.id, 2, "antagonist")
        await series_orch.add_world_rule(series.id, "magic", "Magic costs memory")
        await series_orch.add_world_rule(series.id, "magic", "Magic is free")

        notes = await series_orch.check_series_continuity(series.id, ["world", "world"])

        assert [n.type for n in notes] == [ContinuityArea.WORLD]
        assert notes[0].status == ContinuityStatus.CONFLICTED
        task = series_orch.projects.list_tasks(series.id)[-1]
        assert task.type == TaskType.CHECK_CONTINUITY
        assert task.input.focus_areas == ("world",)

    @pytest.mark.asyncio
    async def test_unknown_area_creates_no_task(self, series_orch):
        series = series_orch.create_book_series()
        with pytest.raises(ValidationError):
            await series_orch.check_series_continuity(series.id, ["magic"])
        assert series_orch.projects.list_tasks() == []

    @pytest.mark.asyncio
    async def test_empty_focus_list_clears_notes(self, series_orch):
        series = series_orch.create_book_series()
        vey = await series_orch.add_series_character(series.id, {"name": "Vey", "role": "protagonist"})
        await series_orch.record_book_appearance(series.id, vey.id, 2, "antagonist")
        await series_orch.check_series_continuity(series.id)
        assert await series_orch.check_series_continuity(series.id, []) == []
        assert series_orch.get_series(series.id).continuity_notes == []


class TestWorldBible:
    @pytest.mark.asyncio
    async def test_partial_failure_isolated(self, series_orch, fake_generator):
        series = series_orch.create_book_series()

        async def expand(category, series_view, writing):
            if category == WorldBibleCategory.CULTURES:
                raise RuntimeError("rate limited")
            return [WorldEntry(name=f"New {category.value}")]

        fake_generator.expand_world_category.side_effect = expand
        bible = await series_orch.expand_world_bible(series.id, ["locations", "cultures", "religions"])

        assert [e.name for e in bible.locations] == ["New locations"]
        assert bible.cultures == []
        assert [e.name for e in bible.religions] == ["New religions"]
        task = series_orch.projects.list_tasks(series.id)[0]
        assert task.status == TaskStatus.COMPLETE
        assert task.output["additions"] == {"locations": 1, "religions": 1}
        assert "rate limited" in task.output["failures"]["cultures"]

    @pytest.mark.asyncio
    async def test_entries_append(self, series_orch):
        series = series_orch.create_book_series()
        await series_orch.expand_world_bible(series.id, ["locations"])
        bible = await series_orch.expand_world_bible(series.id, [WorldBibleCategory.LOCATIONS])
        assert len(bible.locations) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("categories", [[], ["dragons"]])
    async def test_invalid_categories(self, series_orch, categories):
        series = series_orch.create_book_series()
        with pytest.raises(ValidationError):
            await series_orch.expand_world_bible(series.id, categories)
        assert series_orch.projects.list_tasks() == []


class TestTransitions:
    @pytest.mark.asyncio
    async def test_plan_returned_without_task(self, series_orch):
        series = series_orch.create_book_series()
        plan = await series_orch.plan_book_transition(series.id, 1, 2)
        assert plan.cliffhangers == ["The heir is found"]
        assert series_orch.projects.list_tasks() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("from_book,to_book", [(0, 1), (1, 4), (2, 2), ("1", 2)])
    async def test_invalid_book_numbers(self, series_orch, fake_generator, from_book, to_book):
        series = series_orch.create_book_series()
        with pytest.raises(ValidationError):
            await series_orch.plan_book_transition(series.id, from_book, to_book)
        fake_generator.plan_book_transition.assert_not_called()


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_two_books_of_five_hundred_words(self, series_orch, projects, fake_generator):
        series = series_orch.create_book_series(total_planned_books=2)
        fake_generator.write_chapter.return_value = _words(500)
        for _ in range(2):
            book = await series_orch.add_book_to_series(series.id)
            await projects.write_chapter(book.id)

        analytics = series_orch.get_series_analytics(series.id)

        assert analytics.total_words == 1000
        assert analytics.average_book_length == 500
        assert analytics.completion_percentage == 100

    @pytest.mark.asyncio
    async def test_idempotent_for_fixed_instant(self, series_orch):
        series = series_orch.create_book_series()
        await series_orch.add_book_to_series(series.id)
        now = dt.datetime.now() + dt.timedelta(days=3)
        assert series_orch.get_series_analytics(series.id, now=now) == series_orch.get_series_analytics(series.id, now=now)

    def test_unknown_series(self, series_orch):
        with pytest.raises(NotFoundError):
            series_orch.get_series_analytics("missing")
