"""Custom exception hierarchy for the novel writing agent."""

from typing import Optional


class NovelAgentError(Exception):
    """Base exception for all novel agent errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Lookup / configuration errors ----

class NotFoundError(NovelAgentError):
    """A referenced project, series, character or task does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found", {"id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class NotConfiguredError(NovelAgentError):
    """A required external-service credential is missing."""


# ---- Validation errors ----

class ValidationError(NovelAgentError):
    """Caller-supplied input is structurally invalid."""


# ---- Generation errors ----

class GenerationError(NovelAgentError):
    """The content generator failed or returned no content."""


class ResponseParseError(GenerationError):
    """Failed to parse a structured response from the content generator."""

    def __init__(self, message: str = "Failed to parse generator response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response


class OriginalityRejectedError(NovelAgentError):
    """Generated content did not pass the originality gate."""

    def __init__(self, subject: str, confidence: float, message: str = ""):
        msg = message or f"{subject.capitalize()} may contain non-original content"
        super().__init__(msg, {"confidence": round(confidence, 3)})
        self.subject = subject
        self.confidence = confidence


# ---- Task lifecycle errors ----

class TaskStateError(NovelAgentError):
    """Illegal task lifecycle transition."""

    def __init__(self, task_id: str, current: str, requested: str):
        super().__init__(
            f"Task cannot move from {current} to {requested}",
            {"task_id": task_id},
        )
        self.task_id = task_id
        self.current = current
        self.requested = requested
