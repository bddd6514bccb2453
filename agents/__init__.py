"""Agents package — prompt-driven agents behind the content generator."""

from agents.base_agent import BaseAgent
from agents.outline_agent import OutlineAgent
from agents.writer_agent import WriterAgent
from agents.character_agent import CharacterAgent
from agents.world_agent import WorldAgent
from agents.content_generator import ContentGenerator

__all__ = [
    "BaseAgent",
    "OutlineAgent",
    "WriterAgent",
    "CharacterAgent",
    "WorldAgent",
    "ContentGenerator",
]
