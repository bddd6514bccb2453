"""Enumerations for project, series and task status tracking."""

from enum import Enum


class TaskType(str, Enum):
    GENERATE_OUTLINE = "generate_outline"
    WRITE_CHAPTER = "write_chapter"
    DEVELOP_CHARACTER = "develop_character"
    TRANSLATE = "translate"
    PLAGIARISM_CHECK = "plagiarism_check"
    DEVELOP_CHARACTER_ARC = "develop_character_arc"
    CHECK_CONTINUITY = "check_continuity"
    EXPAND_WORLD_BIBLE = "expand_world_bible"


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETE, TaskStatus.ERROR)


class ProjectType(str, Enum):
    FICTION = "fiction"
    NONFICTION = "nonfiction"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    WRITING = "writing"
    EDITING = "editing"
    COMPLETE = "complete"


class ChapterStatus(str, Enum):
    PLANNED = "planned"
    WRITING = "writing"
    COMPLETE = "complete"


class CharacterRole(str, Enum):
    PROTAGONIST = "protagonist"
    ANTAGONIST = "antagonist"
    SUPPORTING = "supporting"
    MINOR = "minor"


class AppearanceRole(str, Enum):
    PROTAGONIST = "protagonist"
    ANTAGONIST = "antagonist"
    SUPPORTING = "supporting"
    MINOR = "minor"
    CAMEO = "cameo"


class SettingImportance(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    MINOR = "minor"


class SeriesStatus(str, Enum):
    PLANNING = "planning"
    WRITING = "writing"
    PUBLISHING = "publishing"
    COMPLETE = "complete"


class ArcType(str, Enum):
    INTRODUCTION = "introduction"
    DEVELOPMENT = "development"
    CLIMAX = "climax"
    RESOLUTION = "resolution"
    TRANSFORMATION = "transformation"


class PlotThreadStatus(str, Enum):
    INTRODUCED = "introduced"
    DEVELOPING = "developing"
    CLIMAX = "climax"
    RESOLVED = "resolved"


class ContinuityArea(str, Enum):
    PLOT = "plot"
    CHARACTER = "character"
    WORLD = "world"
    TIMELINE = "timeline"
    TECHNOLOGY = "technology"


class ContinuityStatus(str, Enum):
    CONSISTENT = "consistent"
    NEEDS_REVIEW = "needs_review"
    CONFLICTED = "conflicted"
    RESOLVED = "resolved"


class WorldBibleCategory(str, Enum):
    LOCATIONS = "locations"
    CULTURES = "cultures"
    TECHNOLOGIES = "technologies"
    MAGIC_SYSTEMS = "magic_systems"
    POLITICAL_SYSTEMS = "political_systems"
    RELIGIONS = "religions"
    LANGUAGES = "languages"
    TIMELINE = "timeline"


class EnhancementKind(str, Enum):
    GRAMMAR = "grammar"
    STYLE = "style"
    FLOW = "flow"
    DIALOGUE = "dialogue"


class PointOfView(str, Enum):
    FIRST = "1st"
    SECOND = "2nd"
    THIRD_LIMITED = "3rd-limited"
    THIRD_OMNISCIENT = "3rd-omniscient"


class PlagiarismStatus(str, Enum):
    CHECKING = "checking"
    CLEAN = "clean"
    POTENTIAL_ISSUES = "potential_issues"
    ERROR = "error"
