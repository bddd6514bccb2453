"""Tests for Agent classes and BaseAgent utilities."""

import pytest
from unittest.mock import patch, AsyncMock

from models.enums import (
    ArcType,
    CharacterRole,
    EnhancementKind,
    PlotThreadStatus,
    WorldBibleCategory,
)
from models.project import Chapter, Character, Project, Setting
from models.series import BookSeries, SeriesCharacter, WorldEntry
from models.writing_settings import WritingSettings


_SECTION_TEMPLATE = """\
## System Prompt
This is the system prompt.

## Other Section
Content of another section that must not leak into the system prompt.

## Last Section
Final content.
"""

_MINIMAL_OUTLINE_TEMPLATE = """\
## System Prompt
You outline novels.

## Outline Instructions
Outline "{title}" ({genre}).
"""


def _project(**overrides) -> Project:
    fields = dict(
        title="The Salt Road",
        genre="Fantasy",
        description="A cartographer maps a drowning empire.",
        target_word_count=80000,
        themes=["memory", "loss"],
    )
    fields.update(overrides)
    return Project(**fields)


def _series(**overrides) -> BookSeries:
    fields = dict(
        title="The Drowned Crown",
        genre="Fantasy",
        description="An empire sinks book by book.",
        total_planned_books=3,
        overall_themes=["power"],
    )
    fields.update(overrides)
    return BookSeries(**fields)


class TestBaseAgent:
    def _make_agent(self, mock_llm, settings):
        from agents.base_agent import BaseAgent
        return BaseAgent(llm_client=mock_llm, settings=settings)

    def test_extract_section_returns_correct_content(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        result = agent._extract_section(_SECTION_TEMPLATE, "System Prompt")
        assert result == "This is the system prompt."

    def test_extract_section_not_found_returns_empty_string(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        assert agent._extract_section(_SECTION_TEMPLATE, "No Such Section") == ""

    def test_extract_section_stops_at_next_header(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        result = agent._extract_section(_SECTION_TEMPLATE, "System Prompt")
        # Content from the next section must not bleed through
        assert "another section" not in result
        assert "Final content" not in result

    def test_extract_last_section_captures_to_end(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        assert agent._extract_section(_SECTION_TEMPLATE, "Last Section") == "Final content."

    def test_load_prompt_raises_file_not_found_for_missing_template(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        with pytest.raises(FileNotFoundError):
            agent._load_prompt("nonexistent_template_xyz_123")

    def test_fill_leaves_json_braces_alone(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        result = agent._fill('Name: {name}. Reply {"name": "..."}', name="Vey")
        assert result == 'Name: Vey. Reply {"name": "..."}'

    def test_fill_does_not_rescan_substituted_values(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        result = agent._fill("{description} / {outline} / {missing}", description="See {outline}", outline="Act one")
        assert result == "See {outline} / Act one / {missing}"

    def test_writing_guidance_low_temperature(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        guidance = agent._writing_guidance(
            WritingSettings(temperature=0.2, max_tokens=900, writing_style="spare", tone="bleak")
        )
        assert "Writing style: spare" in guidance
        assert "Tone: bleak" in guidance
        assert "Point of view: 3rd-limited" in guidance
        assert "precise" in guidance
        assert "900 tokens" in guidance

    def test_writing_guidance_high_temperature(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        guidance = agent._writing_guidance(WritingSettings(temperature=1.0))
        assert "creative risks" in guidance
        assert "Writing style" not in guidance

    def test_model_for_prefers_override(self, mock_llm, settings):
        agent = self._make_agent(mock_llm, settings)
        assert agent._model_for(WritingSettings(model="claude-haiku-4-5"), "default") == "claude-haiku-4-5"
        assert agent._model_for(WritingSettings(), "default") == "default"
        assert agent._model_for(None, "default") == "default"


class TestOutlineAgent:
    @pytest.mark.asyncio
    async def test_generate_outline_fills_project_details(self, mock_llm, settings):
        from agents.outline_agent import OutlineAgent
        mock_llm.chat = AsyncMock(return_value="Part one...")
        agent = OutlineAgent(llm_client=mock_llm, settings=settings)

        result = await agent.generate_outline(_project(), WritingSettings())

        assert result == "Part one..."
        kwargs = mock_llm.chat.call_args.kwargs
        assert "The Salt Road" in kwargs["user_prompt"]
        assert "80000 words" in kwargs["user_prompt"]
        assert "memory, loss" in kwargs["user_prompt"]
        assert kwargs["model"] == settings.llm_model_planning

    @pytest.mark.asyncio
    async def test_generate_outline_uses_patched_template(self, mock_llm, settings):
        from agents.outline_agent import OutlineAgent
        with patch("agents.base_agent._read_prompt_file", return_value=_MINIMAL_OUTLINE_TEMPLATE):
            agent = OutlineAgent(llm_client=mock_llm, settings=settings)
        await agent.generate_outline(_project(), WritingSettings(model="custom-model"))

        kwargs = mock_llm.chat.call_args.kwargs
        assert kwargs["user_prompt"] == 'Outline "The Salt Road" (Fantasy).'
        assert kwargs["system_prompt"].startswith("You outline novels.")
        assert kwargs["model"] == "custom-model"

    @pytest.mark.asyncio
    async def test_generate_series_outline_parses_json(self, mock_llm, settings):
        from agents.outline_agent import OutlineAgent
        mock_llm.chat_json = AsyncMock(return_value={
            "series_overview": "An empire sinks.",
            "book_outlines": ["One", "Two", "Three"],
            "character_arcs": "Vey learns to lead",
            "world_building": ["tides", "guilds"],
            "plot_threads": [
                {"title": "The heir", "introduced_in_book": "2", "books_involved": [2, "3", "x"]},
                {"description": "untitled threads are skipped"},
                "The flood",
            ],
        })
        agent = OutlineAgent(llm_client=mock_llm, settings=settings)

        outline = await agent.generate_series_outline(_series(), WritingSettings())

        assert outline.series_overview == "An empire sinks."
        assert outline.book_outlines == ["One", "Two", "Three"]
        assert outline.character_arcs == ["Vey learns to lead"]
        assert outline.world_building == "tides; guilds"
        assert [t.title for t in outline.plot_threads] == ["The heir", "The flood"]
        heir = outline.plot_threads[0]
        assert heir.introduced_in_book == 2
        assert heir.books_involved == [2, 3]
        assert heir.status == PlotThreadStatus.INTRODUCED

    def test_parse_series_outline_accepts_overview_alias(self):
        from agents.outline_agent import parse_series_outline
        outline = parse_series_outline({"overview": "Short form"})
        assert outline.series_overview == "Short form"
        assert outline.plot_threads == []


class TestWriterAgent:
    @pytest.mark.asyncio
    async def test_write_chapter_opening_context(self, mock_llm, settings):
        from agents.writer_agent import WriterAgent
        mock_llm.chat = AsyncMock(return_value="Chapter text.")
        agent = WriterAgent(llm_client=mock_llm, settings=settings)
        chapter = Chapter(title="Low Tide", order=1)

        result = await agent.write_chapter(chapter, _project(), [], WritingSettings())

        assert result == "Chapter text."
        kwargs = mock_llm.chat.call_args.kwargs
        assert 'Write Chapter 1: "Low Tide"' in kwargs["user_prompt"]
        assert "This is the opening chapter." in kwargs["user_prompt"]
        assert "professional fiction writer" in kwargs["system_prompt"]
        assert kwargs["model"] == settings.llm_model_writing

    @pytest.mark.asyncio
    async def test_write_chapter_includes_previous_chapters(self, mock_llm, settings):
        from agents.writer_agent import WriterAgent
        agent = WriterAgent(llm_client=mock_llm, settings=settings)
        project = _project(
            characters=[Character(name="Vey", description="A cartographer")],
            settings=[Setting(name="Port Veil", description="A harbor city")],
        )
        previous = [
            Chapter(title="Low Tide", order=1, summary="Vey finds the map.", content="...and the bell rang."),
        ]

        await agent.write_chapter(Chapter(title="High Water", order=2), project, previous, WritingSettings())

        prompt = mock_llm.chat.call_args.kwargs["user_prompt"]
        assert "Chapter 1 (Low Tide): Vey finds the map." in prompt
        assert "and the bell rang." in prompt
        assert "- Vey: A cartographer" in prompt
        assert "- Port Veil: A harbor city" in prompt

    @pytest.mark.asyncio
    async def test_write_chapter_keeps_braces_in_project_text(self, mock_llm, settings):
        from agents.writer_agent import WriterAgent
        agent = WriterAgent(llm_client=mock_llm, settings=settings)
        project = _project(description="A map marked {outline} and {characters}", outline="Act one.")

        await agent.write_chapter(Chapter(title="Low Tide", order=1), project, [], WritingSettings())

        prompt = mock_llm.chat.call_args.kwargs["user_prompt"]
        assert "A map marked {outline} and {characters}" in prompt
        assert "Act one." in prompt

    @pytest.mark.asyncio
    async def test_enhance_text_uses_kind_instruction(self, mock_llm, settings):
        from agents.writer_agent import WriterAgent
        mock_llm.chat = AsyncMock(return_value="Better.")
        agent = WriterAgent(llm_client=mock_llm, settings=settings)

        result = await agent.enhance_text("Draft.", EnhancementKind.STYLE, WritingSettings(tone="wry"))

        assert result == "Better."
        kwargs = mock_llm.chat.call_args.kwargs
        assert "Keep the wry tone." in kwargs["user_prompt"]
        assert kwargs["user_prompt"].endswith("Draft.")
        assert kwargs["model"] == settings.llm_model_editing

    @pytest.mark.asyncio
    async def test_translate_text_names_languages(self, mock_llm, settings):
        from agents.writer_agent import WriterAgent
        agent = WriterAgent(llm_client=mock_llm, settings=settings)

        await agent.translate_text("Hello.", "fr")

        prompt = mock_llm.chat.call_args.kwargs["user_prompt"]
        assert "from en to fr" in prompt
        assert prompt.endswith("Hello.")


class TestCharacterAgent:
    @pytest.mark.asyncio
    async def test_develop_character_keeps_identity(self, mock_llm, settings):
        from agents.character_agent import CharacterAgent
        mock_llm.chat_json = AsyncMock(return_value={
            "name": "Renamed",
            "personality": "Patient",
            "background": ["Lighthouse", "Guild"],
            "goals": "",
        })
        agent = CharacterAgent(llm_client=mock_llm, settings=settings)
        character = Character(name="Vey", role=CharacterRole.PROTAGONIST, goals="Chart the harbor")

        developed = await agent.develop_character(character, _project(), WritingSettings())

        assert developed.id == character.id
        assert developed.name == "Vey"
        assert developed.role == CharacterRole.PROTAGONIST
        assert developed.personality == "Patient"
        assert developed.background == "Lighthouse; Guild"
        # Empty fields keep what was there before
        assert developed.goals == "Chart the harbor"

    @pytest.mark.asyncio
    async def test_develop_book_arc_returns_four_fields(self, mock_llm, settings):
        from agents.character_agent import CharacterAgent
        mock_llm.chat_json = AsyncMock(return_value={"description": "Grows", "goals": "Survive"})
        agent = CharacterAgent(llm_client=mock_llm, settings=settings)

        arc = await agent.develop_book_arc(
            SeriesCharacter(name="Vey"), _series(), 2, ArcType.DEVELOPMENT, WritingSettings()
        )

        assert arc == {"description": "Grows", "emotional_state": "", "goals": "Survive", "conflicts": ""}
        prompt = mock_llm.chat_json.call_args.kwargs["user_prompt"]
        assert "Book 2 of 3" in prompt
        assert "development" in prompt


class TestWorldAgent:
    @pytest.mark.asyncio
    async def test_expand_category_parses_entries(self, mock_llm, settings):
        from agents.world_agent import WorldAgent
        mock_llm.chat_json_list = AsyncMock(return_value=[
            {"name": "Port Veil", "description": "A harbor", "population": 4000},
            {"title": "Saltmarsh", "established_in_book": "bad"},
            "The Spire",
            {"description": "nameless entries are dropped"},
            42,
        ])
        agent = WorldAgent(llm_client=mock_llm, settings=settings)
        series = _series()
        series.world_bible.locations.append(WorldEntry(name="Old Quay"))

        entries = await agent.expand_category(WorldBibleCategory.LOCATIONS, series, WritingSettings())

        assert [e.name for e in entries] == ["Port Veil", "Saltmarsh", "The Spire"]
        assert entries[0].details == {"population": 4000}
        assert entries[1].established_in_book == 1
        kwargs = mock_llm.chat_json_list.call_args.kwargs
        assert kwargs["key"] == "locations"
        assert "Already established: Old Quay" in kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_plan_transition(self, mock_llm, settings):
        from agents.world_agent import WorldAgent
        mock_llm.chat_json = AsyncMock(return_value={
            "cliffhangers": ["The heir lives"],
            "continuity_checks": "Check the tide tables",
        })
        agent = WorldAgent(llm_client=mock_llm, settings=settings)

        plan = await agent.plan_transition(_series(), 1, 2, WritingSettings())

        assert plan.from_book == 1 and plan.to_book == 2
        assert plan.cliffhangers == ["The heir lives"]
        assert plan.continuity_checks == ["Check the tide tables"]
        assert plan.plot_advancement == []


class TestContentGenerator:
    def test_is_configured_follows_settings(self, mock_llm, settings, unconfigured_settings):
        from agents.content_generator import ContentGenerator
        assert ContentGenerator(settings, llm_client=mock_llm).is_configured is True
        assert ContentGenerator(unconfigured_settings, llm_client=mock_llm).is_configured is False

    @pytest.mark.asyncio
    async def test_delegates_to_agents(self, mock_llm, settings):
        from agents.content_generator import ContentGenerator
        mock_llm.chat = AsyncMock(return_value="Outline text")
        generator = ContentGenerator(settings, llm_client=mock_llm)

        assert await generator.generate_outline(_project(), WritingSettings()) == "Outline text"
        assert generator.get_usage_summary() == {"total_calls": 1, "total_cost_usd": 0.0}
