"""Models package — entity dataclasses, enums, and the in-memory store."""

from models.store import EntityStore
from models.project import (
    Chapter,
    Character,
    Project,
    Setting,
    TranslationRequest,
    WritingProgress,
)
from models.series import (
    BookAppearance,
    BookSeries,
    BookTransitionPlan,
    CharacterArcNode,
    ContinuityNote,
    SeriesAnalytics,
    SeriesCharacter,
    SeriesOutline,
    SeriesPlotThread,
    SeriesTimelineEvent,
    WorldBible,
    WorldEntry,
    WorldRule,
)
from models.task import Task, TaskInput
from models.writing_settings import WritingSettings, as_writing_settings
from models.enums import (
    TaskType,
    TaskStatus,
    ProjectType,
    ProjectStatus,
    ChapterStatus,
    CharacterRole,
    AppearanceRole,
    SettingImportance,
    SeriesStatus,
    ArcType,
    PlotThreadStatus,
    ContinuityArea,
    ContinuityStatus,
    WorldBibleCategory,
    EnhancementKind,
    PointOfView,
    PlagiarismStatus,
)

__all__ = [
    "EntityStore",
    "Chapter",
    "Character",
    "Project",
    "Setting",
    "TranslationRequest",
    "WritingProgress",
    "BookAppearance",
    "BookSeries",
    "BookTransitionPlan",
    "CharacterArcNode",
    "ContinuityNote",
    "SeriesAnalytics",
    "SeriesCharacter",
    "SeriesOutline",
    "SeriesPlotThread",
    "SeriesTimelineEvent",
    "WorldBible",
    "WorldEntry",
    "WorldRule",
    "Task",
    "TaskInput",
    "WritingSettings",
    "as_writing_settings",
    "TaskType",
    "TaskStatus",
    "ProjectType",
    "ProjectStatus",
    "ChapterStatus",
    "CharacterRole",
    "AppearanceRole",
    "SettingImportance",
    "SeriesStatus",
    "ArcType",
    "PlotThreadStatus",
    "ContinuityArea",
    "ContinuityStatus",
    "WorldBibleCategory",
    "EnhancementKind",
    "PointOfView",
    "PlagiarismStatus",
]
