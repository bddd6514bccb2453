"""Base agent class with common LLM and prompt utilities."""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from config.settings import Settings
from models.writing_settings import WritingSettings
from tools.agent_sdk_client import AgentSDKClient

logger = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).parent.parent / "config" / "prompts"
_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@lru_cache(maxsize=32)
def _read_prompt_file(path: str) -> str:
    """Read and cache a prompt file by absolute path string."""
    return Path(path).read_text(encoding="utf-8")


class BaseAgent:
    """Base class for the agents behind the content generator."""

    def __init__(
        self,
        llm_client: Optional[AgentSDKClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.llm = llm_client or AgentSDKClient(self.settings)

    def _load_prompt(self, template_name: str) -> str:
        """Load a prompt template from config/prompts/ (cached after first read).

        Args:
            template_name: Filename without extension, e.g. 'chapter'.

        Returns:
            The prompt template text.
        """
        path = _PROMPTS_DIR / f"{template_name}.md"
        if not path.exists():
            raise FileNotFoundError(f"Prompt template not found: {path}")
        return _read_prompt_file(str(path))

    def _extract_section(self, template: str, section_header: str) -> str:
        """Extract a specific section from a prompt template.

        Sections are delimited by '## ' headers in the markdown.
        """
        lines = template.split("\n")
        capturing = False
        result = []
        for line in lines:
            if line.strip().startswith("## ") and section_header in line:
                capturing = True
                continue
            elif line.strip().startswith("## ") and capturing:
                break
            elif capturing:
                result.append(line)
        return "\n".join(result).strip()

    @staticmethod
    def _fill(template: str, **values) -> str:
        """Substitute {name} placeholders in one pass.

        Substituted values are never rescanned, and JSON braces or unknown
        names in templates are left alone.
        """
        def replace(match: re.Match) -> str:
            name = match.group(1)
            return str(values[name]) if name in values else match.group(0)

        return _PLACEHOLDER_RE.sub(replace, template)

    def _system_prompt(self, template: str, writing: Optional[WritingSettings] = None) -> str:
        """The template's System Prompt section plus per-call writing guidance."""
        system_prompt = self._extract_section(template, "System Prompt")
        if writing is not None:
            system_prompt += "\n\n" + self._writing_guidance(writing)
        return system_prompt

    @staticmethod
    def _writing_guidance(writing: WritingSettings) -> str:
        """Render generation settings as instructions.

        The SDK exposes no sampling parameters, so temperature and the
        token cap travel as guidance alongside style, tone and POV.
        """
        lines = ["Writing guidance:"]
        if writing.writing_style:
            lines.append(f"- Writing style: {writing.writing_style}")
        if writing.tone:
            lines.append(f"- Tone: {writing.tone}")
        lines.append(f"- Point of view: {writing.point_of_view.value}")
        if writing.temperature <= 0.3:
            lines.append("- Favor precise, conventional phrasing over invention.")
        elif writing.temperature >= 0.9:
            lines.append("- Take creative risks with imagery and structure.")
        lines.append(f"- Keep the response under roughly {writing.max_tokens} tokens.")
        return "\n".join(lines)

    @staticmethod
    def _model_for(writing: Optional[WritingSettings], default: str) -> str:
        if writing is not None and writing.model:
            return writing.model
        return default
