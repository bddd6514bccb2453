"""Shared pytest fixtures for the novel-agent test suite."""

import pytest
from unittest.mock import MagicMock, AsyncMock

from models.enums import PlagiarismStatus
from models.project import Character
from models.series import BookTransitionPlan, SeriesOutline, SeriesPlotThread, WorldEntry
from tools.originality_checker import OriginalityResult, PlagiarismCheck

# Exactly ten whitespace-separated words
TEN_WORDS = "The tide rose over the salt road before dawn broke."


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a configured Settings instance that ignores any local .env."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        anthropic_api_key="test-key",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def unconfigured_settings(tmp_path):
    from config.settings import Settings
    return Settings(_env_file=None, anthropic_api_key="", log_dir=tmp_path / "logs")


# ---------------------------------------------------------------------------
# LLM client mock
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_llm():
    """Return a MagicMock replacing AgentSDKClient."""
    llm = MagicMock()
    llm.chat = AsyncMock(return_value="Generated text.")
    llm.chat_json = AsyncMock(return_value={})
    llm.chat_json_list = AsyncMock(return_value=[])
    llm.get_usage_summary.return_value = {"total_calls": 1, "total_cost_usd": 0.0}
    return llm


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

def _developed(character, project, writing):
    return Character(
        id=character.id,
        name=character.name,
        role=character.role,
        description=character.description or "A cartographer of drowned coasts.",
        personality="Patient, wry",
        background="Raised on a lighthouse",
        goals="Chart the last free harbor",
        conflicts="Owes the harbor guild",
    )


@pytest.fixture
def fake_generator():
    """A configured content generator whose calls all succeed."""
    gen = MagicMock()
    gen.is_configured = True
    gen.generate_outline = AsyncMock(return_value="Act one: the tide turns. Act two: the road floods.")
    gen.write_chapter = AsyncMock(return_value=TEN_WORDS)
    gen.develop_character = AsyncMock(side_effect=_developed)
    gen.enhance_text = AsyncMock(return_value="Enhanced text.")
    gen.translate_text = AsyncMock(return_value="La marée monta.")
    gen.generate_series_outline = AsyncMock(return_value=SeriesOutline(
        series_overview="Three books about a drowning empire.",
        book_outlines=["Book one", "Book two", "Book three"],
        plot_threads=[SeriesPlotThread(title="The missing heir")],
    ))
    gen.develop_book_arc = AsyncMock(return_value={
        "description": "Learns to lead",
        "emotional_state": "Uncertain",
        "goals": "Survive",
        "conflicts": "Self-doubt",
    })
    gen.expand_world_category = AsyncMock(return_value=[WorldEntry(name="Port Veil", description="A harbor city")])
    gen.plan_book_transition = AsyncMock(
        side_effect=lambda series, from_book, to_book, writing: BookTransitionPlan(
            from_book=from_book, to_book=to_book, cliffhangers=["The heir is found"],
        )
    )
    gen.get_usage_summary.return_value = {"total_calls": 0, "total_cost_usd": 0.0}
    return gen


@pytest.fixture
def fake_checker():
    """An originality checker that passes everything."""
    checker = MagicMock()
    checker.check_originality = AsyncMock(return_value=OriginalityResult(is_original=True, confidence=1.0))
    checker.check_plagiarism = AsyncMock(
        side_effect=lambda content, check_id: PlagiarismCheck(
            id=check_id, content=content, status=PlagiarismStatus.CLEAN, confidence=1.0,
        )
    )
    return checker


# ---------------------------------------------------------------------------
# Orchestrators
# ---------------------------------------------------------------------------

@pytest.fixture
def projects(fake_generator, fake_checker, settings):
    from workflow.project_orchestrator import ProjectOrchestrator
    return ProjectOrchestrator(fake_generator, fake_checker, settings=settings)


@pytest.fixture
def series_orch(projects, fake_generator, settings):
    from workflow.series_orchestrator import SeriesOrchestrator
    return SeriesOrchestrator(projects, fake_generator, settings=settings)
