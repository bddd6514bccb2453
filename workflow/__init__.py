"""Workflow package — task ledger, orchestrators, continuity and analytics."""

from workflow.callbacks import TaskCallback, LoggingCallback, RichProgressCallback
from workflow.task_ledger import TaskLedger
from workflow.continuity import determine_arc_type, run_checks
from workflow.analytics import generate_series_analytics
from workflow.project_orchestrator import ProjectOrchestrator
from workflow.series_orchestrator import SeriesOrchestrator
from workflow.runtime import NovelAgentRuntime, build_runtime

__all__ = [
    "TaskCallback",
    "LoggingCallback",
    "RichProgressCallback",
    "TaskLedger",
    "determine_arc_type",
    "run_checks",
    "generate_series_analytics",
    "ProjectOrchestrator",
    "SeriesOrchestrator",
    "NovelAgentRuntime",
    "build_runtime",
]
