"""In-memory entity store: identifier-indexed tables of projects, series and tasks.

Nothing is persisted; the store lives as long as the runtime that created it.
Mutation goes through the orchestrators, which serialize work on one entity
with the per-entity locks handed out here.
"""

import asyncio
import logging
from typing import Optional

from models.project import Project
from models.series import BookSeries
from models.task import Task

logger = logging.getLogger(__name__)


class EntityStore:
    """Arena-style tables keyed by entity id, plus one asyncio.Lock per entity."""

    def __init__(self):
        self.projects: dict[str, Project] = {}
        self.series: dict[str, BookSeries] = {}
        self.tasks: dict[str, Task] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # ---- Locks ----

    def lock(self, entity_id: str) -> asyncio.Lock:
        """Return the lock serializing mutations of one project or series.

        Only stored entities get a registered lock; an unknown id gets a
        throwaway one, so failed lookups leave nothing behind.
        """
        lock = self._locks.get(entity_id)
        if lock is not None:
            return lock
        lock = asyncio.Lock()
        if entity_id in self.projects or entity_id in self.series:
            self._locks[entity_id] = lock
        return lock

    def drop_lock(self, entity_id: str) -> None:
        self._locks.pop(entity_id, None)

    # ---- Project table ----

    def add_project(self, project: Project) -> None:
        self.projects[project.id] = project

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.projects.get(project_id)

    def list_projects(self) -> list[Project]:
        return list(self.projects.values())

    def remove_project(self, project_id: str) -> bool:
        removed = self.projects.pop(project_id, None) is not None
        if removed:
            logger.debug("Removed project %s", project_id)
        return removed

    # ---- Series table ----

    def add_series(self, series: BookSeries) -> None:
        self.series[series.id] = series

    def get_series(self, series_id: str) -> Optional[BookSeries]:
        return self.series.get(series_id)

    def list_series(self) -> list[BookSeries]:
        return list(self.series.values())

    def remove_series(self, series_id: str) -> bool:
        removed = self.series.pop(series_id, None) is not None
        if removed:
            logger.debug("Removed series %s", series_id)
        return removed
