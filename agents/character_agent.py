"""Character Agent: character profiles and per-book series arcs."""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.settings import Settings
from models.enums import ArcType
from models.project import Character, Project
from models.series import BookSeries, SeriesCharacter
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient
from tools.json_utils import as_text

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("description", "personality", "background", "goals", "conflicts")
_ARC_FIELDS = ("description", "emotional_state", "goals", "conflicts")


class CharacterAgent(BaseAgent):
    """Develops characters for single projects and across series."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(llm_client, settings)
        self._template = self._load_prompt("character")
        self._arc_template = self._load_prompt("character_arc")

    async def develop_character(
        self,
        character: Character,
        project: Project,
        writing: WritingSettings,
    ) -> Character:
        """Flesh out a character card; identity, name and role are kept.

        Fields the response leaves empty keep their previous values.
        """
        setting = project.settings[0] if project.settings else None
        user_prompt = self._fill(
            self._extract_section(self._template, "Character Instructions"),
            name=character.name,
            project_type=project.type.value,
            project_title=project.title,
            role=character.role.value,
            description=character.description or "None yet",
            genre=project.genre,
            setting=f"{setting.name} ({setting.timeframe})" if setting else "To be determined",
            themes=", ".join(project.themes) or "To be determined",
        )

        logger.info("CharacterAgent: developing '%s' for '%s'", character.name, project.title)
        data = await self.llm.chat_json(
            system_prompt=self._system_prompt(self._template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_writing),
        )

        profile = {name: as_text(data.get(name)) or getattr(character, name) for name in _PROFILE_FIELDS}
        return Character(id=character.id, name=character.name, role=character.role, **profile)

    async def develop_book_arc(
        self,
        character: SeriesCharacter,
        series: BookSeries,
        book_number: int,
        arc_type: ArcType,
        writing: WritingSettings,
    ) -> dict:
        """Generate one book's arc waypoint.

        Returns:
            Dict with keys: description, emotional_state, goals, conflicts.
        """
        user_prompt = self._fill(
            self._extract_section(self._arc_template, "Arc Instructions"),
            name=character.name,
            book_number=book_number,
            total_books=series.total_planned_books,
            series_title=series.title,
            background=character.background or "Not yet written",
            role=character.role.value,
            themes=", ".join(series.overall_themes) or "To be determined",
            arc_type=arc_type.value,
        )

        logger.debug("CharacterAgent: arc for '%s', book %d", character.name, book_number)
        data = await self.llm.chat_json(
            system_prompt=self._system_prompt(self._arc_template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_writing),
        )
        return {name: as_text(data.get(name)) for name in _ARC_FIELDS}
