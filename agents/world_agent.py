"""World Agent: world-bible expansion and book-to-book transition planning."""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.settings import Settings
from models.enums import WorldBibleCategory
from models.series import BookSeries, BookTransitionPlan, WorldEntry
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient
from tools.json_utils import as_str_list, as_text

logger = logging.getLogger(__name__)

# Entries listed back to the model so it builds on them, per category
_MAX_EXISTING_LISTED = 20

_DETAIL_SKIP = {"name", "title", "description", "established_in_book"}


def _parse_entries(items: list) -> list[WorldEntry]:
    entries = []
    for item in items:
        if isinstance(item, str) and item.strip():
            entries.append(WorldEntry(name=item.strip()))
            continue
        if not isinstance(item, dict):
            continue
        name = as_text(item.get("name") or item.get("title"))
        if not name:
            continue
        try:
            book = int(item.get("established_in_book", 1))
        except (TypeError, ValueError):
            book = 1
        entries.append(WorldEntry(
            name=name,
            description=as_text(item.get("description")),
            established_in_book=max(1, book),
            details={k: v for k, v in item.items() if k not in _DETAIL_SKIP},
        ))
    return entries


class WorldAgent(BaseAgent):
    """Grows a series' world bible and plans transitions between books."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(llm_client, settings)
        self._template = self._load_prompt("world_bible")
        self._transition_template = self._load_prompt("transition")

    async def expand_category(
        self,
        category: WorldBibleCategory,
        series: BookSeries,
        writing: WritingSettings,
    ) -> list[WorldEntry]:
        """Propose new entries for one world-bible category."""
        label = category.value.replace("_", " ")
        existing = getattr(series.world_bible, category.value)
        listed = ", ".join(e.name for e in existing[:_MAX_EXISTING_LISTED])
        user_prompt = self._fill(
            self._extract_section(self._template, "World Instructions"),
            category=label,
            series_title=series.title,
            genre=series.genre,
            description=series.description or "To be determined",
            themes=", ".join(series.overall_themes) or "To be determined",
            existing=listed or "nothing yet",
        )

        logger.info("WorldAgent: expanding %s for '%s'", label, series.title)
        items = await self.llm.chat_json_list(
            system_prompt=self._system_prompt(self._template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_planning),
            key=category.value,
        )
        entries = _parse_entries(items)
        logger.info("WorldAgent: %d new %s", len(entries), label)
        return entries

    async def plan_transition(
        self,
        series: BookSeries,
        from_book: int,
        to_book: int,
        writing: WritingSettings,
    ) -> BookTransitionPlan:
        user_prompt = self._fill(
            self._extract_section(self._transition_template, "Transition Instructions"),
            from_book=from_book,
            to_book=to_book,
            series_title=series.title,
            description=series.description or "To be determined",
            total_books=series.total_planned_books,
            themes=", ".join(series.overall_themes) or "To be determined",
        )

        logger.info("WorldAgent: planning transition %d -> %d for '%s'", from_book, to_book, series.title)
        data = await self.llm.chat_json(
            system_prompt=self._system_prompt(self._transition_template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_planning),
        )
        return BookTransitionPlan(
            from_book=from_book,
            to_book=to_book,
            cliffhangers=as_str_list(data.get("cliffhangers")),
            character_transitions=as_str_list(data.get("character_transitions")),
            plot_advancement=as_str_list(data.get("plot_advancement")),
            world_progression=as_str_list(data.get("world_progression")),
            continuity_checks=as_str_list(data.get("continuity_checks")),
        )
