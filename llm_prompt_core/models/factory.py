"""
Provider selection for the dialogue model.
"""

from __future__ import annotations

import logging

from constants import (
    ANTHROPIC_MODEL,
    LLM_MAX_TOKENS_DIALOGUE,
    LLM_PROVIDER,
    LLM_TEMPERATURE_DIALOGUE,
    LLM_TIMEOUT_SECONDS,
    OLLAMA_HOST,
    OLLAMA_MODEL,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
)
from llm_prompt_core.models.anthropic import ClaudeModel
from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.models.ollama import OllamaModel
from llm_prompt_core.models.openai import OpenAIModel

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic", "ollama")


def create_dialogue_model(provider: str | None = None) -> BaseLLMModel:
    """
    Build the text-generation model for character dialogue.

    Args:
        provider: "openai", "anthropic" or "ollama". Defaults to LLM_PROVIDER.

    Returns:
        A configured model wrapper

    Raises:
        ValueError: If the provider is unknown
        EnvironmentError: If the provider's API key is missing
    """
    provider = (provider or LLM_PROVIDER).lower()

    if provider == "openai":
        model: BaseLLMModel = OpenAIModel(
            model_name=OPENAI_MODEL,
            base_url=OPENAI_BASE_URL,
            temperature=LLM_TEMPERATURE_DIALOGUE,
            max_tokens=LLM_MAX_TOKENS_DIALOGUE,
            request_timeout=LLM_TIMEOUT_SECONDS,
        )
    elif provider == "anthropic":
        model = ClaudeModel(
            model_name=ANTHROPIC_MODEL,
            temperature=LLM_TEMPERATURE_DIALOGUE,
            max_tokens=LLM_MAX_TOKENS_DIALOGUE,
            request_timeout=LLM_TIMEOUT_SECONDS,
        )
    elif provider == "ollama":
        model = OllamaModel(
            model_name=OLLAMA_MODEL,
            host=OLLAMA_HOST,
            temperature=LLM_TEMPERATURE_DIALOGUE,
            max_tokens=LLM_MAX_TOKENS_DIALOGUE,
            request_timeout=LLM_TIMEOUT_SECONDS,
        )
    else:
        raise ValueError(
            f"Unknown LLM provider '{provider}'. Expected one of: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    logger.info("Dialogue model initialized: provider=%s model=%s", provider, model.model_name)
    return model
