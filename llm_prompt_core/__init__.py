"""
LLM Prompt Core - character dialogue on top of a text-generation model.

This package holds everything that talks to, or about, the language model:
provider wrappers (OpenAI, Claude, Ollama), the transcript value types that
are resent on every turn, the persona prompt templates, and the layered
parser that turns free-text replies into {response, emotion} pairs.
"""

from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.parsing import parse_character_reply
from llm_prompt_core.prompts.builder import PromptBuilder
from llm_prompt_core.types import CharacterReply, ConversationLog, Message

__all__ = [
    "BaseLLMModel",
    "CharacterReply",
    "ConversationLog",
    "Message",
    "PromptBuilder",
    "parse_character_reply",
]

__version__ = "0.1.0"
