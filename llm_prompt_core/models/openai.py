"""
OpenAI model wrapper.

This module provides a LangChain-compatible wrapper for OpenAI chat models
(and any server speaking the same API through OPENAI_BASE_URL).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from pydantic import ConfigDict, PrivateAttr

from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.utils import transcript_to_chat_messages


class OpenAIModel(BaseLLMModel):
    """
    LangChain-compatible wrapper for OpenAI models.

    The serialised transcript is expanded back into chat messages so the
    persona lands in the system role, and JSON output mode is requested
    since every reply must be a single JSON object.

    Attributes:
        model_name: Name of the OpenAI model to use (e.g., "gpt-4o-mini")
        temperature: Controls randomness in generation (0.0 to 2.0)
        max_tokens: Maximum number of tokens to generate
        api_key: Optional API key (defaults to OPENAI_API_KEY env variable)
        base_url: Optional API base URL for OpenAI-compatible servers
        request_timeout: Client-side timeout for one HTTP request, in seconds
        json_mode: Ask the API to constrain output to a JSON object
    """

    model_name: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 1000
    api_key: str | None = None
    base_url: str | None = None
    request_timeout: float = 30.0
    json_mode: bool = True

    _client: Any = PrivateAttr()

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(self, **data: Any):
        super().__init__(**data)
        resolved_api_key = self._get_api_key("OPENAI_API_KEY", "OpenAI")

        from openai import OpenAI

        client_kwargs: dict[str, Any] = {"timeout": self.request_timeout}
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        self._client = self._initialize_client(OpenAI, resolved_api_key, "openai", **client_kwargs)

    def _call(
        self,
        prompt: str,
        stop: Sequence[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text using OpenAI API.

        Args:
            prompt: The input text prompt (usually a serialised transcript)
            stop: Optional list of stop sequences
            run_manager: Optional callback manager
            **kwargs: Additional parameters (temperature, max_tokens, etc.)

        Returns:
            Generated text response

        Raises:
            RuntimeError: If OpenAI fails to generate a response
        """
        # Override defaults with kwargs if provided
        temperature = kwargs.pop("temperature", self.temperature)
        max_tokens = kwargs.pop("max_tokens", self.max_tokens)
        if self.json_mode:
            kwargs.setdefault("response_format", {"type": "json_object"})

        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=transcript_to_chat_messages(prompt),
                stop=list(stop) if stop else None,
                **kwargs,
            )

            if not response.choices:
                raise RuntimeError("OpenAI response did not contain any choices.")

            content = response.choices[0].message.content
            if content is None:
                raise RuntimeError("OpenAI response did not contain any text.")

            return content

        except Exception as e:
            self._handle_api_error(e, "OpenAI")

    def is_model_available(self) -> bool:
        """Check that the configured model is listed by the API."""
        try:
            self._client.models.retrieve(self.model_name)
            return True
        except Exception:
            return False

    @property
    def _llm_type(self) -> str:
        return "openai"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
