"""Writing project data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.enums import (
    ChapterStatus,
    CharacterRole,
    ProjectStatus,
    ProjectType,
    SettingImportance,
)


def new_id() -> str:
    """Return a fresh entity identifier."""
    return str(uuid.uuid4())


@dataclass
class Chapter:
    """A single chapter. word_count is derived from content, never supplied."""
    id: str = field(default_factory=new_id)
    title: str = ""
    content: str = ""
    word_count: int = 0
    status: ChapterStatus = ChapterStatus.PLANNED
    summary: str = ""
    order: int = 1


@dataclass
class Character:
    """A character card within one project."""
    id: str = field(default_factory=new_id)
    name: str = ""
    description: str = ""
    role: CharacterRole = CharacterRole.SUPPORTING
    personality: str = ""
    background: str = ""
    goals: str = ""
    conflicts: str = ""


@dataclass
class Setting:
    """A story location or period."""
    id: str = field(default_factory=new_id)
    name: str = ""
    description: str = ""
    timeframe: str = ""
    importance: SettingImportance = SettingImportance.SECONDARY


@dataclass
class Project:
    """A writing project (a novel, or one book of a series).

    current_word_count is recomputed from chapters after every chapter
    mutation and is never set independently.
    """
    id: str = field(default_factory=new_id)
    title: str = ""
    description: str = ""
    genre: str = ""
    type: ProjectType = ProjectType.FICTION
    target_word_count: int = 0
    current_word_count: int = 0
    status: ProjectStatus = ProjectStatus.PLANNING
    chapters: list[Chapter] = field(default_factory=list)
    outline: str = ""
    characters: list[Character] = field(default_factory=list)
    settings: list[Setting] = field(default_factory=list)
    themes: list[str] = field(default_factory=list)
    series_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def find_chapter(self, chapter_id: str) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None

    def find_character(self, character_id: str) -> Optional[Character]:
        for character in self.characters:
            if character.id == character_id:
                return character
        return None


@dataclass
class WritingProgress:
    """Snapshot of a project's progress toward its word target."""
    project_id: str
    total_words: int
    words_today: int
    chapters_completed: int
    total_chapters: int
    estimated_completion: datetime
    writing_streak: int


@dataclass
class TranslationRequest:
    """Result record of a translate task."""
    id: str
    project_id: str
    source_language: str
    target_language: str
    content: str
    translated_content: str = ""
    status: str = "complete"
    created_at: datetime = field(default_factory=datetime.now)
