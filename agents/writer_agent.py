"""Writer Agent: chapter drafting, text enhancement and translation."""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.settings import Settings
from models.enums import EnhancementKind
from models.project import Chapter, Project
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient
from tools.text_utils import excerpt, get_chapter_ending

logger = logging.getLogger(__name__)


def _format_context(previous_chapters: list[Chapter]) -> str:
    """Summaries of earlier chapters, plus the ending of the latest one."""
    if not previous_chapters:
        return "This is the opening chapter."
    lines = ["Previous chapters:"]
    for chapter in previous_chapters:
        summary = chapter.summary or excerpt(chapter.content, 200)
        lines.append(f"- Chapter {chapter.order} ({chapter.title}): {summary}")
    ending = get_chapter_ending(previous_chapters[-1].content)
    if ending:
        lines.append("")
        lines.append(f"The previous chapter ends:\n{ending}")
    return "\n".join(lines)


class WriterAgent(BaseAgent):
    """Produces and revises narrative prose."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(llm_client, settings)
        self._template = self._load_prompt("chapter")
        self._enhance_template = self._load_prompt("enhance")
        self._translate_template = self._load_prompt("translate")

    async def write_chapter(
        self,
        chapter: Chapter,
        project: Project,
        previous_chapters: list[Chapter],
        writing: WritingSettings,
    ) -> str:
        """Write one chapter.

        Args:
            chapter: The chapter being written (title, order, summary set).
            project: The owning project, for genre, cast and settings.
            previous_chapters: Chapters ordered before this one.
            writing: Per-call generation settings.

        Returns:
            The chapter text.
        """
        system_prompt = self._fill(
            self._system_prompt(self._template, writing),
            project_type=project.type.value,
        )
        characters = "\n".join(f"- {c.name}: {c.description}" for c in project.characters)
        settings_text = "\n".join(f"- {s.name}: {s.description}" for s in project.settings)
        user_prompt = self._fill(
            self._extract_section(self._template, "Chapter Instructions"),
            order=chapter.order,
            chapter_title=chapter.title,
            project_type=project.type.value,
            project_title=project.title,
            genre=project.genre,
            description=project.description,
            outline=excerpt(project.outline, 2000) or "No outline yet.",
            summary=chapter.summary or "Continue the story.",
            context=_format_context(previous_chapters),
            characters=characters or "None established yet.",
            settings=settings_text or "None established yet.",
        )

        logger.info("Writing chapter %d of '%s'...", chapter.order, project.title)
        return await self.llm.chat(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_writing),
        )

    async def enhance_text(self, content: str, kind: EnhancementKind, writing: WritingSettings) -> str:
        instruction = self._fill(
            self._extract_section(self._enhance_template, kind.value),
            writing_style=writing.writing_style or "vivid",
            tone=writing.tone or "original",
        )
        user_prompt = self._fill(
            self._extract_section(self._enhance_template, "Enhancement Instructions"),
            instruction=instruction,
            content=content,
        )
        logger.info("Enhancing %d chars of text (%s)", len(content), kind.value)
        return await self.llm.chat(
            system_prompt=self._system_prompt(self._enhance_template, writing),
            user_prompt=user_prompt,
            model=self._model_for(writing, self.settings.llm_model_editing),
        )

    async def translate_text(self, content: str, target_language: str, source_language: str = "en") -> str:
        user_prompt = self._fill(
            self._extract_section(self._translate_template, "Translation Instructions"),
            source_language=source_language,
            target_language=target_language,
            content=content,
        )
        logger.info("Translating %d chars from %s to %s", len(content), source_language, target_language)
        return await self.llm.chat(
            system_prompt=self._system_prompt(self._translate_template),
            user_prompt=user_prompt,
            model=self.settings.llm_model_editing,
        )
