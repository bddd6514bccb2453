"""Project orchestrator: outline, chapter and character authoring for one project.

Every authoring operation follows the same sequence under the project's
lock: create a task, call the content generator (and originality checker
where gated), write the result to the store, finalize the task. Failures
finalize the task as error and propagate to the caller.
"""

import copy
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Mapping, Optional

from config.exceptions import (
    GenerationError,
    NotConfiguredError,
    NotFoundError,
    NovelAgentError,
    OriginalityRejectedError,
    ValidationError,
)
from config.settings import Settings
from models.enums import (
    ChapterStatus,
    CharacterRole,
    EnhancementKind,
    PlagiarismStatus,
    ProjectStatus,
    ProjectType,
    SettingImportance,
    TaskStatus,
    TaskType,
)
from models.project import (
    Chapter,
    Character,
    Project,
    Setting,
    TranslationRequest,
    WritingProgress,
    new_id,
)
from models.store import EntityStore
from models.task import (
    ChapterTaskInput,
    CharacterTaskInput,
    OutlineTaskInput,
    PlagiarismCheckTaskInput,
    Task,
    TranslationTaskInput,
)
from models.writing_settings import as_writing_settings
from tools.text_utils import count_words
from workflow.task_ledger import TaskLedger

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_TITLE = "Untitled Novel"
DEFAULT_GENRE = "General Fiction"
DEFAULT_CHARACTER_NAME = "Unnamed Character"
DEFAULT_SETTING_NAME = "Unnamed Setting"
DEFAULT_TIMEFRAME = "Present day"

_CHARACTER_TEXT_FIELDS = ("description", "personality", "background", "goals", "conflicts")


async def guarded(awaitable: Awaitable, action: str) -> Any:
    """Await a collaborator call, converting foreign exceptions to GenerationError."""
    try:
        return await awaitable
    except NovelAgentError:
        raise
    except Exception as e:
        raise GenerationError(f"{action} failed: {e}") from e


def require_content(result: Any, action: str) -> Any:
    """Reject a missing or blank generator result."""
    if result is None or (isinstance(result, str) and not result.strip()):
        raise GenerationError(f"{action} returned no content")
    return result


def coerce_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field_name}", {field_name: value}) from e


def _optional_positive_int(data: Mapping, key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer", {key: value})
    if value < 1:
        raise ValidationError(f"{key} must be at least 1", {key: value})
    return value


class ProjectOrchestrator:
    """Owns the lifecycle of writing projects and their authoring tasks.

    Args:
        generator: Content generator collaborator; must be configured.
        checker: Originality checker collaborator.
        store: Entity store. Defaults to the ledger's store, or a new one.
        ledger: Task ledger. Defaults to a ledger over ``store``.
        settings: Application settings.

    Raises:
        NotConfiguredError: If the generator has no credential.
    """

    def __init__(
        self,
        generator,
        checker,
        store: Optional[EntityStore] = None,
        ledger: Optional[TaskLedger] = None,
        settings: Optional[Settings] = None,
    ):
        if not generator.is_configured:
            raise NotConfiguredError("Content generator credential is not configured")
        self.generator = generator
        self.checker = checker
        self.settings = settings or Settings()
        if store is None:
            store = ledger.store if ledger is not None else EntityStore()
        self.store = store
        self.ledger = ledger or TaskLedger(self.store)

    def _require_project(self, project_id: str) -> Project:
        project = self.store.get_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project

    # ---- Project CRUD ----

    def create_project(
        self,
        *,
        title: str = "",
        description: str = "",
        genre: str = "",
        project_type="fiction",
        target_word_count: Optional[int] = None,
        themes: Optional[list[str]] = None,
        series_id: Optional[str] = None,
    ) -> Project:
        """Create a project, filling omitted fields with defaults."""
        if target_word_count is None:
            target_word_count = self.settings.default_target_word_count
        if isinstance(target_word_count, bool) or not isinstance(target_word_count, int) or target_word_count <= 0:
            raise ValidationError(
                "target_word_count must be a positive integer",
                {"target_word_count": target_word_count},
            )
        project = Project(
            title=title or DEFAULT_PROJECT_TITLE,
            description=description,
            genre=genre or DEFAULT_GENRE,
            type=coerce_enum(ProjectType, project_type or ProjectType.FICTION, "project_type"),
            target_word_count=target_word_count,
            themes=list(themes or []),
            series_id=series_id,
        )
        self.store.add_project(project)
        logger.info("Created project %s ('%s')", project.id, project.title)
        return copy.deepcopy(project)

    def get_project(self, project_id: str) -> Project:
        return copy.deepcopy(self._require_project(project_id))

    def list_projects(self) -> list[Project]:
        return copy.deepcopy(self.store.list_projects())

    async def update_project_status(self, project_id: str, status) -> Project:
        status = coerce_enum(ProjectStatus, status, "status")
        async with self.store.lock(project_id):
            project = self._require_project(project_id)
            project.status = status
            project.updated_at = datetime.now()
            return copy.deepcopy(project)

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project and every task referencing it.

        A book is also detached from its series. Returns False if the
        project did not exist.
        """
        project = self.store.get_project(project_id)
        if project is None:
            return False
        if project.series_id is None or self.store.get_series(project.series_id) is None:
            return await self.delete_owned_project(project_id)

        series_id = project.series_id
        async with self.store.lock(series_id):
            removed = await self.delete_owned_project(project_id)
            series = self.store.get_series(series_id)
            if series is not None and series.remove_book(project_id):
                series.updated_at = datetime.now()
            return removed

    async def delete_owned_project(self, project_id: str) -> bool:
        """Delete a project and its tasks without touching its series.

        Callers deleting a book hold the series lock already.
        """
        async with self.store.lock(project_id):
            if not self.store.remove_project(project_id):
                return False
            removed_tasks = self.ledger.delete_all_for(project_id)
        self.store.drop_lock(project_id)
        logger.info("Deleted project %s (%d tasks)", project_id, removed_tasks)
        return True

    async def add_setting(self, project_id: str, setting_data: Mapping[str, Any]) -> Setting:
        """Add or replace (by id) a story setting."""
        importance = coerce_enum(
            SettingImportance,
            setting_data.get("importance") or SettingImportance.SECONDARY,
            "importance",
        )
        async with self.store.lock(project_id):
            project = self._require_project(project_id)
            setting = Setting(
                id=setting_data.get("id") or new_id(),
                name=setting_data.get("name") or DEFAULT_SETTING_NAME,
                description=setting_data.get("description", ""),
                timeframe=setting_data.get("timeframe") or DEFAULT_TIMEFRAME,
                importance=importance,
            )
            for i, existing in enumerate(project.settings):
                if existing.id == setting.id:
                    project.settings[i] = setting
                    break
            else:
                project.settings.append(setting)
            project.updated_at = datetime.now()
            return copy.deepcopy(setting)

    # ---- Authoring ----

    async def generate_project_outline(self, project_id: str, settings=None) -> dict:
        """Generate, originality-check and store a project outline.

        Returns:
            Dict with keys: task_id, outline.

        Raises:
            NotFoundError: Unknown project.
            OriginalityRejectedError: The outline failed the originality check;
                the project's outline is left unchanged.
            GenerationError: The generator failed or returned nothing.
        """
        writing = as_writing_settings(settings)
        async with self.store.lock(project_id):
            project = self._require_project(project_id)
            task = self.ledger.create(TaskType.GENERATE_OUTLINE, OutlineTaskInput(project_id, writing))
            with self.ledger.running(task):
                outline = require_content(
                    await guarded(
                        self.generator.generate_outline(copy.deepcopy(project), writing),
                        "Outline generation",
                    ),
                    "Outline generation",
                )
                check = await guarded(self.checker.check_originality(outline), "Originality check")
                if not check.is_original:
                    raise OriginalityRejectedError("outline", check.confidence)

                project.outline = outline
                project.updated_at = datetime.now()
                self.ledger.complete(task, {"outline": outline, "originality_check": check})

        logger.info("Outline stored for project %s (%d words)", project_id, count_words(outline))
        return {"task_id": task.id, "outline": outline}

    async def write_chapter(self, project_id: str, chapter_data: Optional[Mapping[str, Any]] = None, settings=None) -> dict:
        """Write a chapter and upsert it by id.

        ``chapter_data`` may carry id, title, summary and order. The
        generator sees every chapter ordered before this one.

        Returns:
            Dict with keys: task_id, chapter.

        Raises:
            NotFoundError: Unknown project.
            OriginalityRejectedError: The plagiarism check reported potential
                issues below the confidence threshold; nothing is stored.
            GenerationError: The generator failed or returned nothing.
        """
        chapter_data = dict(chapter_data or {})
        writing = as_writing_settings(settings)
        requested_order = _optional_positive_int(chapter_data, "order")

        async with self.store.lock(project_id):
            project = self._require_project(project_id)
            existing = project.find_chapter(chapter_data["id"]) if chapter_data.get("id") else None
            if requested_order is not None:
                order = requested_order
            else:
                order = existing.order if existing else len(project.chapters) + 1
            chapter = Chapter(
                id=chapter_data.get("id") or new_id(),
                title=chapter_data.get("title") or (existing.title if existing else f"Chapter {order}"),
                summary=chapter_data.get("summary") or (existing.summary if existing else ""),
                order=order,
                status=ChapterStatus.WRITING,
            )
            previous = sorted(
                (c for c in project.chapters if c.order < chapter.order and c.id != chapter.id),
                key=lambda c: c.order,
            )

            task = self.ledger.create(
                TaskType.WRITE_CHAPTER, ChapterTaskInput(project_id, chapter_data, writing)
            )
            with self.ledger.running(task):
                content = require_content(
                    await guarded(
                        self.generator.write_chapter(
                            copy.deepcopy(chapter),
                            copy.deepcopy(project),
                            copy.deepcopy(previous),
                            writing,
                        ),
                        "Chapter generation",
                    ),
                    "Chapter generation",
                )
                check = await guarded(self.checker.check_plagiarism(content, task.id), "Plagiarism check")
                if (check.status == PlagiarismStatus.POTENTIAL_ISSUES
                        and check.confidence < self.settings.plagiarism_confidence_threshold):
                    raise OriginalityRejectedError("chapter", check.confidence)

                chapter.content = content
                chapter.word_count = count_words(content)
                chapter.status = ChapterStatus.COMPLETE
                self._upsert_chapter(project, chapter)
                self.ledger.complete(task, {
                    "chapter": copy.deepcopy(chapter),
                    "word_count": chapter.word_count,
                    "plagiarism_check": check,
                })

        logger.info(
            "Chapter %d of project %s written: %d words (project total %d)",
            chapter.order, project_id, chapter.word_count, project.current_word_count,
        )
        return {"task_id": task.id, "chapter": copy.deepcopy(chapter)}

    @staticmethod
    def _upsert_chapter(project: Project, chapter: Chapter) -> None:
        for i, existing in enumerate(project.chapters):
            if existing.id == chapter.id:
                project.chapters[i] = chapter
                break
        else:
            project.chapters.append(chapter)
        project.current_word_count = sum(c.word_count for c in project.chapters)
        project.updated_at = datetime.now()

    async def develop_character(self, project_id: str, character_data: Optional[Mapping[str, Any]] = None, settings=None) -> dict:
        """Develop a character card and upsert it by id. Not originality-gated.

        Returns:
            Dict with keys: task_id, character.
        """
        character_data = dict(character_data or {})
        writing = as_writing_settings(settings)
        role = character_data.get("role")
        if role is not None:
            role = coerce_enum(CharacterRole, role, "role")

        async with self.store.lock(project_id):
            project = self._require_project(project_id)
            existing = project.find_character(character_data["id"]) if character_data.get("id") else None
            base = Character(
                id=character_data.get("id") or new_id(),
                name=character_data.get("name") or (existing.name if existing else DEFAULT_CHARACTER_NAME),
                role=role or (existing.role if existing else CharacterRole.SUPPORTING),
            )
            for name in _CHARACTER_TEXT_FIELDS:
                setattr(base, name, character_data.get(name) or (getattr(existing, name) if existing else ""))

            task = self.ledger.create(
                TaskType.DEVELOP_CHARACTER, CharacterTaskInput(project_id, character_data, writing)
            )
            with self.ledger.running(task):
                character = require_content(
                    await guarded(
                        self.generator.develop_character(copy.deepcopy(base), copy.deepcopy(project), writing),
                        "Character development",
                    ),
                    "Character development",
                )
                character.id = base.id
                for i, current in enumerate(project.characters):
                    if current.id == character.id:
                        project.characters[i] = character
                        break
                else:
                    project.characters.append(character)
                project.updated_at = datetime.now()
                self.ledger.complete(task, {"character": copy.deepcopy(character)})

        logger.info("Character '%s' developed for project %s", character.name, project_id)
        return {"task_id": task.id, "character": copy.deepcopy(character)}

    async def enhance_text(self, content: str, enhancement, settings=None) -> str:
        """Stateless enhancement pass; no task is recorded."""
        kind = coerce_enum(EnhancementKind, enhancement, "enhancement")
        if not content or not content.strip():
            raise ValidationError("content must not be empty")
        writing = as_writing_settings(settings)
        return require_content(
            await guarded(self.generator.enhance_text(content, kind, writing), "Text enhancement"),
            "Text enhancement",
        )

    async def translate_content(
        self,
        project_id: str,
        content: str,
        target_language: str,
        source_language: str = "en",
    ) -> dict:
        """Translate text belonging to a project.

        Returns:
            Dict with keys: task_id, translation (a TranslationRequest).
        """
        if not content or not content.strip():
            raise ValidationError("content must not be empty")
        if not target_language:
            raise ValidationError("target_language is required")
        self._require_project(project_id)

        task = self.ledger.create(
            TaskType.TRANSLATE,
            TranslationTaskInput(project_id, content, target_language, source_language or "en"),
        )
        with self.ledger.running(task):
            translated = require_content(
                await guarded(
                    self.generator.translate_text(content, target_language, source_language or "en"),
                    "Translation",
                ),
                "Translation",
            )
            translation = TranslationRequest(
                id=task.id,
                project_id=project_id,
                source_language=source_language or "en",
                target_language=target_language,
                content=content,
                translated_content=translated,
            )
            self.ledger.complete(task, {"translation": translation})

        return {"task_id": task.id, "translation": copy.deepcopy(translation)}

    async def check_plagiarism(self, project_id: str, content: str) -> dict:
        """Run the originality checker alone and record the verdict.

        Returns:
            Dict with keys: task_id, check.
        """
        if not content or not content.strip():
            raise ValidationError("content must not be empty")
        self._require_project(project_id)

        task = self.ledger.create(TaskType.PLAGIARISM_CHECK, PlagiarismCheckTaskInput(project_id, content))
        with self.ledger.running(task):
            check = await guarded(self.checker.check_plagiarism(content, task.id), "Plagiarism check")
            if check.status == PlagiarismStatus.ERROR:
                raise GenerationError("Plagiarism check could not be completed")
            self.ledger.complete(task, {"check": check})

        return {"task_id": task.id, "check": copy.deepcopy(check)}

    # ---- Progress and tasks ----

    def get_writing_progress(self, project_id: str, now: Optional[datetime] = None) -> WritingProgress:
        """Snapshot of progress toward the word target.

        The completion estimate uses the configured daily word rate;
        words_today and the streak are measured from completed chapter tasks.
        """
        project = self._require_project(project_id)
        now = now or datetime.now()

        remaining = max(0, project.target_word_count - project.current_word_count)
        days_left = math.ceil(remaining / self.settings.assumed_daily_word_rate)

        chapter_tasks = [
            t for t in self.ledger.list(project_id)
            if t.type == TaskType.WRITE_CHAPTER and t.status == TaskStatus.COMPLETE
        ]
        today = now.date()
        words_today = sum(
            t.output.get("word_count", 0) for t in chapter_tasks if t.completed_at.date() == today
        )

        return WritingProgress(
            project_id=project.id,
            total_words=project.current_word_count,
            words_today=words_today,
            chapters_completed=sum(1 for c in project.chapters if c.status == ChapterStatus.COMPLETE),
            total_chapters=len(project.chapters),
            estimated_completion=now + timedelta(days=days_left),
            writing_streak=_writing_streak({t.completed_at.date() for t in chapter_tasks}, today),
        )

    def get_task(self, task_id: str) -> Task:
        task = self.ledger.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return copy.deepcopy(task)

    def list_tasks(self, project_id: Optional[str] = None) -> list[Task]:
        return copy.deepcopy(self.ledger.list(project_id))


def _writing_streak(active_days: set[date], today: date) -> int:
    """Consecutive days ending today with at least one completed chapter."""
    streak = 0
    day = today
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak
