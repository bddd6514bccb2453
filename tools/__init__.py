"""Tools package — Agent SDK client, text utilities, JSON parsing, originality checks."""

from tools.agent_sdk_client import AgentSDKClient
from tools.json_utils import extract_json, parse_json_list, parse_json_object
from tools.originality_checker import (
    OriginalityChecker,
    OriginalityResult,
    PlagiarismCheck,
    PlagiarismMatch,
)
from tools.text_utils import (
    count_words,
    excerpt,
    get_chapter_ending,
    similarity,
    split_sentences,
)

__all__ = [
    "AgentSDKClient",
    "extract_json",
    "parse_json_list",
    "parse_json_object",
    "OriginalityChecker",
    "OriginalityResult",
    "PlagiarismCheck",
    "PlagiarismMatch",
    "count_words",
    "excerpt",
    "get_chapter_ending",
    "similarity",
    "split_sentences",
]
