"""Outline Agent: project outlines as prose, series outlines as structured JSON."""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.settings import Settings
from models.enums import PlotThreadStatus
from models.project import Project
from models.series import BookSeries, SeriesOutline, SeriesPlotThread
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient
from tools.json_utils import as_str_list, as_text

logger = logging.getLogger(__name__)


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_plot_threads(raw) -> list[SeriesPlotThread]:
    threads = []
    if not isinstance(raw, list):
        return threads
    for item in raw:
        if isinstance(item, str):
            threads.append(SeriesPlotThread(title=item.strip()))
            continue
        if not isinstance(item, dict) or not item.get("title"):
            continue
        introduced = _as_int(item.get("introduced_in_book"), 1)
        books = [b for b in (_as_int(v, 0) for v in item.get("books_involved") or []) if b > 0]
        threads.append(SeriesPlotThread(
            title=as_text(item["title"]),
            description=as_text(item.get("description")),
            status=PlotThreadStatus.INTRODUCED,
            introduced_in_book=introduced,
            books_involved=books or [introduced],
        ))
    return threads


def parse_series_outline(data: dict) -> SeriesOutline:
    """Build a SeriesOutline from the generator's JSON object."""
    return SeriesOutline(
        series_overview=as_text(data.get("series_overview") or data.get("overview")),
        book_outlines=as_str_list(data.get("book_outlines")),
        character_arcs=as_str_list(data.get("character_arcs")),
        world_building=as_text(data.get("world_building")),
        plot_threads=_parse_plot_threads(data.get("plot_threads")),
    )


class OutlineAgent(BaseAgent):
    """Plans whole works: a single novel or a multi-book series."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(llm_client, settings)
        self._template = self._load_prompt("outline")
        self._series_template = self._load_prompt("series_outline")

    async def generate_outline(self, project: Project, writing: WritingSettings) -> str:
        """Generate a prose outline for one project."""
        user_prompt = self._fill(
            self._extract_section(self._template, "Outline Instructions"),
            project_type=project.type.value,
            title=project.title,
            genre=project.genre,
            description=project.description or "To be determined",
            target_word_count=project.target_word_count,
            themes=", ".join(project.themes) or "To be determined",
        )
        logger.info("OutlineAgent: outlining project '%s'", project.title)
        return await self.llm.chat(
            system_prompt=self._system_prompt(self._template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_planning),
        )

    async def generate_series_outline(self, series: BookSeries, writing: WritingSettings) -> SeriesOutline:
        """Generate and parse a structured outline for a whole series."""
        user_prompt = self._fill(
            self._extract_section(self._series_template, "Series Outline Instructions"),
            series_type=series.type.value,
            title=series.title,
            genre=series.genre,
            description=series.description or "To be determined",
            total_planned_books=series.total_planned_books,
            words_per_book=self.settings.words_per_book_estimate,
            themes=", ".join(series.overall_themes) or "To be determined",
        )
        logger.info(
            "OutlineAgent: outlining series '%s' (%d books)",
            series.title, series.total_planned_books,
        )
        data = await self.llm.chat_json(
            system_prompt=self._system_prompt(self._series_template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_planning),
        )
        outline = parse_series_outline(data)
        logger.info(
            "OutlineAgent: series outline has %d book outlines, %d plot threads",
            len(outline.book_outlines), len(outline.plot_threads),
        )
        return outline
