"""Claude Agent SDK wrapper used by every content-generation agent."""

import logging
import os
from typing import Any, Optional

from claude_agent_sdk import (
    query,
    ClaudeAgentOptions,
    ResultMessage,
    AssistantMessage,
)

from config.exceptions import GenerationError, ResponseParseError
from config.settings import Settings
from tools.json_utils import parse_json_list, parse_json_object

logger = logging.getLogger(__name__)

# The SDK refuses to start when it believes it is nested in another session.
os.environ.pop("CLAUDECODE", None)


class AgentSDKClient:
    """Thin async client over claude_agent_sdk.query().

    The API key from Settings, when set, is forwarded to the SDK's environment.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.total_calls = 0
        self.total_cost_usd = 0.0

    def _options(self, system_prompt: str, model: str) -> ClaudeAgentOptions:
        options_kwargs = {
            "system_prompt": system_prompt,
            "model": model,
            "max_turns": 1,
        }
        if self.settings.is_generator_configured:
            options_kwargs["env"] = {"ANTHROPIC_API_KEY": self.settings.anthropic_api_key}
        return ClaudeAgentOptions(**options_kwargs)

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
    ) -> str:
        """Send a single-turn request and return the text result.

        Args:
            system_prompt: System message guiding the model's behavior.
            user_prompt: User message content.
            model: Model name override. Defaults to the writing model.

        Returns:
            The model's text response (possibly empty).

        Raises:
            GenerationError: If the query fails.
        """
        model = model or self.settings.llm_model_writing
        self.total_calls += 1
        logger.debug("AgentSDK call #%d: model=%s, prompt=%d chars",
                      self.total_calls, model, len(user_prompt))

        result_text = ""
        streamed_text = ""
        try:
            # The generator must be exhausted: leaving the loop early trips
            # anyio cancel scopes inside the SDK.
            async for message in query(prompt=user_prompt, options=self._options(system_prompt, model)):
                if isinstance(message, ResultMessage):
                    result_text = message.result or ""
                    if message.total_cost_usd:
                        self.total_cost_usd += message.total_cost_usd
                elif isinstance(message, AssistantMessage):
                    for block in message.content:
                        streamed_text += getattr(block, "text", None) or ""
        except Exception as e:
            raise GenerationError(f"Agent SDK query failed: {e}") from e

        text = result_text or streamed_text
        logger.debug("AgentSDK result: %d chars", len(text))
        if not text:
            logger.warning("AgentSDK returned no content (model=%s)", model)
        return text

    async def chat_json(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
    ) -> dict:
        """Send a request and parse the response as a JSON object.

        Raises:
            ResponseParseError: If the response holds no parseable JSON.
        """
        text = await self.chat(system_prompt, user_prompt, model)
        try:
            return parse_json_object(text)
        except ValueError as e:
            raise ResponseParseError(str(e), raw_response=text) from e

    async def chat_json_list(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        key: str = "items",
    ) -> list[Any]:
        """Send a request and parse the response as a JSON list."""
        text = await self.chat(system_prompt, user_prompt, model)
        try:
            return parse_json_list(text, key=key)
        except ValueError as e:
            raise ResponseParseError(str(e), raw_response=text) from e

    def get_usage_summary(self) -> dict:
        """Return call count and accumulated cost."""
        return {"total_calls": self.total_calls, "total_cost_usd": self.total_cost_usd}
