"""Per-call generation settings passed through to the content generator."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from config.exceptions import ValidationError
from models.enums import PointOfView

# Boundary-layer (camelCase) spellings accepted by from_dict
_KEY_ALIASES = {
    "maxTokens": "max_tokens",
    "writingStyle": "writing_style",
    "pointOfView": "point_of_view",
}


@dataclass
class WritingSettings:
    """Generation options. Only presence and type are checked here; their
    effect on the generated text is the content generator's business."""
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 4000
    writing_style: str = ""
    tone: str = ""
    point_of_view: PointOfView = PointOfView.THIRD_LIMITED

    def __post_init__(self):
        if self.model is not None and not isinstance(self.model, str):
            raise ValidationError("model must be a string", {"model": self.model})
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            raise ValidationError("temperature must be a number", {"temperature": self.temperature})
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int):
            raise ValidationError("max_tokens must be an integer", {"max_tokens": self.max_tokens})
        for name in ("writing_style", "tone"):
            if not isinstance(getattr(self, name), str):
                raise ValidationError(f"{name} must be a string")
        try:
            self.point_of_view = PointOfView(self.point_of_view)
        except ValueError as e:
            raise ValidationError(
                "Unknown point of view", {"point_of_view": self.point_of_view}
            ) from e
        self.temperature = float(self.temperature)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WritingSettings":
        """Build settings from a request payload, accepting camelCase keys."""
        if not data:
            return cls()
        known = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)


def as_writing_settings(value) -> WritingSettings:
    """Accept None, a WritingSettings, or a request payload dict."""
    if value is None:
        return WritingSettings()
    if isinstance(value, WritingSettings):
        return value
    if isinstance(value, Mapping):
        return WritingSettings.from_dict(value)
    raise ValidationError("settings must be a mapping", {"type": type(value).__name__})
