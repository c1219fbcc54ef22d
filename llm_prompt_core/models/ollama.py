"""
Ollama model wrapper.

This module provides a LangChain-compatible wrapper for a local Ollama
server, talking to its HTTP API with httpx.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from langchain_core.callbacks.manager import CallbackManagerForLLMRun
from pydantic import ConfigDict, PrivateAttr

from llm_prompt_core.models.base import BaseLLMModel


class OllamaModel(BaseLLMModel):
    """
    LangChain-compatible wrapper for models served by Ollama.

    The serialised transcript is posted as-is to ``/api/generate`` with JSON
    output format requested.

    Attributes:
        model_name: Name of the local model (e.g., "llama3.2")
        host: Base URL of the Ollama server
        temperature: Controls randomness in generation
        max_tokens: Maximum number of tokens to generate (num_predict)
        request_timeout: Timeout for one HTTP request, in seconds
    """

    model_name: str = "llama3.2"
    host: str = "http://localhost:11434"
    temperature: float = 0.7
    max_tokens: int = 1000
    request_timeout: float = 30.0

    _client: Any = PrivateAttr()

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(self, **data: Any):
        super().__init__(**data)
        self._client = httpx.Client(base_url=self.host.rstrip("/"), timeout=self.request_timeout)

    def _call(
        self,
        prompt: str,
        stop: Sequence[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text using the Ollama generate endpoint.

        Raises:
            ConnectionError: If the server cannot be reached
            TimeoutError: If the request times out
            RuntimeError: If Ollama returns an error or an empty reply
        """
        options: dict[str, Any] = {
            "temperature": kwargs.pop("temperature", self.temperature),
            "num_predict": kwargs.pop("max_tokens", self.max_tokens),
        }
        if stop:
            options["stop"] = list(stop)

        payload = {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": options,
        }

        try:
            response = self._client.post("/api/generate", json=payload)
            response.raise_for_status()
            text = response.json().get("response")
            if not text:
                raise RuntimeError("Ollama response did not contain any text.")
            return text
        except httpx.TimeoutException as e:
            self._handle_api_error(TimeoutError(str(e)), "Ollama")
        except httpx.TransportError as e:
            self._handle_api_error(ConnectionError(str(e)), "Ollama")
        except Exception as e:
            self._handle_api_error(e, "Ollama")

    def is_model_available(self) -> bool:
        """Check that the server is up and has the configured model pulled."""
        try:
            response = self._client.get("/api/tags")
            response.raise_for_status()
        except httpx.HTTPError:
            return False

        names = {model.get("name", "") for model in response.json().get("models", [])}
        return any(
            name == self.model_name or name.split(":")[0] == self.model_name for name in names
        )

    @property
    def _llm_type(self) -> str:
        return "ollama"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "host": self.host,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
