"""Task records and their per-type input payloads.

Each task type accepts a fixed set of input classes. Every input exposes
``parent_ids``: the project and series identifiers it refers to, which is
what parent filtering and cascade deletion match on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from models.enums import TaskStatus, TaskType
from models.project import new_id
from models.writing_settings import WritingSettings


@dataclass(frozen=True)
class OutlineTaskInput:
    project_id: str
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.project_id,)


@dataclass(frozen=True)
class SeriesOutlineTaskInput:
    series_id: str
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.series_id,)


@dataclass(frozen=True)
class ChapterTaskInput:
    project_id: str
    chapter_data: dict
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.project_id,)


@dataclass(frozen=True)
class CharacterTaskInput:
    project_id: str
    character_data: dict
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.project_id,)


@dataclass(frozen=True)
class TranslationTaskInput:
    project_id: str
    content: str
    target_language: str
    source_language: str = "en"

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.project_id,)


@dataclass(frozen=True)
class PlagiarismCheckTaskInput:
    project_id: str
    content: str

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.project_id,)


@dataclass(frozen=True)
class CharacterArcTaskInput:
    series_id: str
    character_id: str
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.series_id,)


@dataclass(frozen=True)
class ContinuityTaskInput:
    series_id: str
    focus_areas: tuple[str, ...]

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.series_id,)


@dataclass(frozen=True)
class WorldBibleTaskInput:
    series_id: str
    categories: tuple[str, ...]
    settings: WritingSettings

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return (self.series_id,)


TaskInput = Union[
    OutlineTaskInput,
    SeriesOutlineTaskInput,
    ChapterTaskInput,
    CharacterTaskInput,
    TranslationTaskInput,
    PlagiarismCheckTaskInput,
    CharacterArcTaskInput,
    ContinuityTaskInput,
    WorldBibleTaskInput,
]

TASK_INPUT_CLASSES: dict[TaskType, tuple[type, ...]] = {
    TaskType.GENERATE_OUTLINE: (OutlineTaskInput, SeriesOutlineTaskInput),
    TaskType.WRITE_CHAPTER: (ChapterTaskInput,),
    TaskType.DEVELOP_CHARACTER: (CharacterTaskInput,),
    TaskType.TRANSLATE: (TranslationTaskInput,),
    TaskType.PLAGIARISM_CHECK: (PlagiarismCheckTaskInput,),
    TaskType.DEVELOP_CHARACTER_ARC: (CharacterArcTaskInput,),
    TaskType.CHECK_CONTINUITY: (ContinuityTaskInput,),
    TaskType.EXPAND_WORLD_BIBLE: (WorldBibleTaskInput,),
}


@dataclass
class Task:
    """Lifecycle record of one orchestrated asynchronous operation.

    status only moves pending -> running -> complete | error.
    completed_at is set exactly when status is terminal.
    """
    type: TaskType
    input: TaskInput
    id: str = field(default_factory=new_id)
    status: TaskStatus = TaskStatus.PENDING
    output: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def references(self, parent_id: str) -> bool:
        return parent_id in self.input.parent_ids
