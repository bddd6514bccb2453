"""Configuration settings loaded from .env file."""

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from the environment or a .env file.

    The API key is the content generator's credential. Orchestrators refuse
    to start without it, so a missing key surfaces at startup rather than on
    the first request.
    """

    # Content generator credential
    anthropic_api_key: str = ""

    # LLM models: one per agent role, overridable per call via WritingSettings.model
    llm_model_planning: str = "claude-opus-4-6"   # OutlineAgent, WorldAgent
    llm_model_writing: str = "claude-opus-4-6"    # WriterAgent, CharacterAgent
    llm_model_editing: str = "claude-sonnet-4-6"  # enhance / translate

    # Project defaults
    default_target_word_count: int = 80000

    # Series defaults
    default_planned_books: int = 3
    min_planned_books: int = 2

    # Estimates
    assumed_daily_word_rate: int = 1000
    words_per_book_estimate: int = 80000
    words_per_chapter_estimate: int = 3000

    # Originality gates
    originality_threshold: float = 0.8
    plagiarism_confidence_threshold: float = 0.7
    repeated_sentence_similarity: float = 0.8

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator(
        "default_target_word_count",
        "assumed_daily_word_rate",
        "words_per_book_estimate",
        "words_per_chapter_estimate",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("word counts and rates must be >= 1")
        return v

    @field_validator(
        "originality_threshold",
        "plagiarism_confidence_threshold",
        "repeated_sentence_similarity",
    )
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("thresholds must lie within [0, 1]")
        return v

    @field_validator("min_planned_books")
    @classmethod
    def validate_min_planned_books(cls, v: int) -> int:
        if v < 1:
            raise ValueError("min_planned_books must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_planned_books(self) -> "Settings":
        if self.default_planned_books < self.min_planned_books:
            raise ValueError(
                f"default_planned_books ({self.default_planned_books}) must be at least "
                f"min_planned_books ({self.min_planned_books})"
            )
        return self

    @property
    def is_generator_configured(self) -> bool:
        return bool(self.anthropic_api_key.strip())


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
