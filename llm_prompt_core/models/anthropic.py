"""
Anthropic Claude model wrapper.

This module provides a LangChain-compatible wrapper for Claude models.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from pydantic import ConfigDict, PrivateAttr

from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.utils import transcript_to_chat_messages


class ClaudeModel(BaseLLMModel):
    """
    LangChain-compatible wrapper for Anthropic Claude models.

    The Messages API takes the system prompt separately, so system entries
    of the transcript are lifted into ``system=`` and the rest are sent as
    alternating user/assistant turns.

    Attributes:
        model_name: Name of the Claude model to use
        temperature: Controls randomness in generation (0.0 to 1.0)
        max_tokens: Maximum number of tokens to generate
        api_key: Optional API key (defaults to ANTHROPIC_API_KEY env variable)
        request_timeout: Client-side timeout for one HTTP request, in seconds
    """

    model_name: str = "claude-3-5-haiku-20241022"
    temperature: float = 0.7
    max_tokens: int = 1000
    api_key: str | None = None
    request_timeout: float = 30.0

    _client: Any = PrivateAttr()

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(self, **data: Any):
        super().__init__(**data)
        resolved_api_key = self._get_api_key("ANTHROPIC_API_KEY", "Claude")

        from anthropic import Anthropic

        self._client = self._initialize_client(
            Anthropic, resolved_api_key, "anthropic", timeout=self.request_timeout
        )

    @staticmethod
    def _split_system(prompt: str) -> tuple[str, list[dict[str, str]]]:
        """Separate system entries from the conversational turns."""
        system_parts = []
        turns: list[dict[str, str]] = []
        for message in transcript_to_chat_messages(prompt):
            if message["role"] == "system":
                system_parts.append(message["content"])
            elif turns and turns[-1]["role"] == message["role"]:
                # The API rejects two consecutive turns from the same role
                turns[-1] = {
                    "role": message["role"],
                    "content": turns[-1]["content"] + "\n\n" + message["content"],
                }
            else:
                turns.append(message)

        if not turns or turns[0]["role"] != "user":
            turns.insert(0, {"role": "user", "content": "Begin."})
        return "\n\n".join(system_parts), turns

    def _call(
        self,
        prompt: str,
        stop: Sequence[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text using Claude API.

        Args:
            prompt: The input text prompt (usually a serialised transcript)
            stop: Optional list of stop sequences
            run_manager: Optional callback manager
            **kwargs: Additional parameters (temperature, max_tokens, etc.)

        Returns:
            Generated text response

        Raises:
            RuntimeError: If Claude fails to generate a response
        """
        # Override defaults with kwargs if provided
        temperature = kwargs.pop("temperature", self.temperature)
        max_tokens = kwargs.pop("max_tokens", self.max_tokens)
        system, messages = self._split_system(prompt)
        if system:
            kwargs["system"] = system
        if stop:
            kwargs["stop_sequences"] = list(stop)

        try:
            response = self._client.messages.create(
                model=self.model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=messages,
                **kwargs,
            )

            if not response.content:
                raise RuntimeError("Claude response did not contain any text.")

            return response.content[0].text

        except Exception as e:
            self._handle_api_error(e, "Claude")

    @property
    def _llm_type(self) -> str:
        return "anthropic-claude"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
