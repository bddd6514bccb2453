"""Tests for the custom exception hierarchy."""

import pytest
from config.exceptions import (
    NovelAgentError,
    NotFoundError,
    NotConfiguredError,
    ValidationError,
    GenerationError,
    ResponseParseError,
    OriginalityRejectedError,
    TaskStateError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_novel_agent_error(self):
        leaf_classes = [
            NotFoundError, NotConfiguredError, ValidationError, GenerationError,
            ResponseParseError, OriginalityRejectedError, TaskStateError,
        ]
        for cls in leaf_classes:
            assert issubclass(cls, NovelAgentError), f"{cls.__name__} must inherit NovelAgentError"

    def test_parse_error_is_a_generation_error(self):
        assert issubclass(ResponseParseError, GenerationError)

    def test_can_catch_via_base_class(self):
        with pytest.raises(NovelAgentError):
            raise GenerationError("generator down")


class TestExceptionMessages:
    def test_str_without_details(self):
        assert str(NovelAgentError("plain")) == "plain"

    def test_str_appends_details(self):
        err = NovelAgentError("bad input", {"field": "title"})
        assert str(err) == "bad input (field=title)"

    def test_not_found_names_entity_and_id(self):
        err = NotFoundError("project", "abc")
        assert err.entity == "project"
        assert err.entity_id == "abc"
        assert str(err) == "Project not found (id=abc)"

    def test_originality_rejection_carries_confidence(self):
        err = OriginalityRejectedError("outline", 0.41234)
        assert err.confidence == 0.41234
        assert err.details["confidence"] == 0.412
        assert "Outline may contain non-original content" in str(err)

    def test_response_parse_error_truncates_raw_response(self):
        err = ResponseParseError(raw_response="x" * 500)
        assert len(err.details["raw_response"]) == 200
        assert err.raw_response == "x" * 500

    def test_task_state_error_records_transition(self):
        err = TaskStateError("t1", "complete", "running")
        assert err.current == "complete"
        assert err.requested == "running"
        assert "complete to running" in str(err)
