"""Content generator: the single LLM-facing collaborator of the orchestrators.

Prompt construction and response parsing live in the agents behind this
facade; orchestrators only see entities in and text or entities out.
"""

import logging
from typing import Optional

from agents.character_agent import CharacterAgent
from agents.outline_agent import OutlineAgent
from agents.world_agent import WorldAgent
from agents.writer_agent import WriterAgent
from config.settings import Settings
from models.enums import ArcType, EnhancementKind, WorldBibleCategory
from models.project import Chapter, Character, Project
from models.series import BookSeries, BookTransitionPlan, SeriesCharacter, SeriesOutline, WorldEntry
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient

logger = logging.getLogger(__name__)


class ContentGenerator:
    """Facade over the outline, writer, character and world agents.

    All agents share one AgentSDKClient so usage is tracked in one place.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        llm_client: Optional[AgentSDKClient] = None,
    ):
        self.settings = settings or Settings()
        self.llm = llm_client or AgentSDKClient(self.settings)
        self.outline_agent = OutlineAgent(self.llm, self.settings)
        self.writer_agent = WriterAgent(self.llm, self.settings)
        self.character_agent = CharacterAgent(self.llm, self.settings)
        self.world_agent = WorldAgent(self.llm, self.settings)

    @property
    def is_configured(self) -> bool:
        return self.settings.is_generator_configured

    # ---- Project content ----

    async def generate_outline(self, project: Project, writing: WritingSettings) -> str:
        return await self.outline_agent.generate_outline(project, writing)

    async def write_chapter(
        self,
        chapter: Chapter,
        project: Project,
        previous_chapters: list[Chapter],
        writing: WritingSettings,
    ) -> str:
        return await self.writer_agent.write_chapter(chapter, project, previous_chapters, writing)

    async def develop_character(
        self, character: Character, project: Project, writing: WritingSettings
    ) -> Character:
        return await self.character_agent.develop_character(character, project, writing)

    async def enhance_text(self, content: str, kind: EnhancementKind, writing: WritingSettings) -> str:
        return await self.writer_agent.enhance_text(content, kind, writing)

    async def translate_text(self, content: str, target_language: str, source_language: str = "en") -> str:
        return await self.writer_agent.translate_text(content, target_language, source_language)

    # ---- Series content ----

    async def generate_series_outline(self, series: BookSeries, writing: WritingSettings) -> SeriesOutline:
        return await self.outline_agent.generate_series_outline(series, writing)

    async def develop_book_arc(
        self,
        character: SeriesCharacter,
        series: BookSeries,
        book_number: int,
        arc_type: ArcType,
        writing: WritingSettings,
    ) -> dict:
        return await self.character_agent.develop_book_arc(character, series, book_number, arc_type, writing)

    async def expand_world_category(
        self, category: WorldBibleCategory, series: BookSeries, writing: WritingSettings
    ) -> list[WorldEntry]:
        return await self.world_agent.expand_category(category, series, writing)

    async def plan_book_transition(
        self, series: BookSeries, from_book: int, to_book: int, writing: WritingSettings
    ) -> BookTransitionPlan:
        return await self.world_agent.plan_transition(series, from_book, to_book, writing)

    def get_usage_summary(self) -> dict:
        return self.llm.get_usage_summary()
