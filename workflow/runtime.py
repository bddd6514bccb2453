"""Explicit startup wiring: one store, one ledger, both orchestrators."""

import logging
from dataclasses import dataclass
from typing import Optional

from agents.content_generator import ContentGenerator
from config.settings import Settings
from models.store import EntityStore
from tools.originality_checker import OriginalityChecker
from workflow.callbacks import LoggingCallback
from workflow.project_orchestrator import ProjectOrchestrator
from workflow.series_orchestrator import SeriesOrchestrator
from workflow.task_ledger import TaskLedger

logger = logging.getLogger(__name__)


@dataclass
class NovelAgentRuntime:
    settings: Settings
    store: EntityStore
    ledger: TaskLedger
    generator: ContentGenerator
    checker: OriginalityChecker
    projects: ProjectOrchestrator
    series: SeriesOrchestrator


def build_runtime(
    settings: Optional[Settings] = None,
    generator=None,
    checker=None,
) -> NovelAgentRuntime:
    """Construct every component eagerly.

    Raises:
        NotConfiguredError: If the content generator has no credential, so a
            misconfigured process fails at startup rather than on first use.
    """
    settings = settings or Settings()
    store = EntityStore()
    ledger = TaskLedger(store, callbacks=[LoggingCallback()])
    generator = generator or ContentGenerator(settings)
    checker = checker or OriginalityChecker(settings)

    projects = ProjectOrchestrator(generator, checker, store=store, ledger=ledger, settings=settings)
    series = SeriesOrchestrator(projects, generator, settings=settings)
    logger.info("Runtime ready (writing model: %s)", settings.llm_model_writing)
    return NovelAgentRuntime(
        settings=settings,
        store=store,
        ledger=ledger,
        generator=generator,
        checker=checker,
        projects=projects,
        series=series,
    )
