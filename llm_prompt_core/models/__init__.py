"""
Model wrappers for different LLM providers.

This module provides unified interfaces for OpenAI, Claude (Anthropic) and
Ollama models, plus a factory that picks one from configuration.
"""

from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.models.anthropic import ClaudeModel
from llm_prompt_core.models.factory import SUPPORTED_PROVIDERS, create_dialogue_model
from llm_prompt_core.models.ollama import OllamaModel
from llm_prompt_core.models.openai import OpenAIModel

__all__ = [
    "BaseLLMModel",
    "ClaudeModel",
    "OllamaModel",
    "OpenAIModel",
    "SUPPORTED_PROVIDERS",
    "create_dialogue_model",
]
