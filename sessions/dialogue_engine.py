"""
Dialogue Engine Module

Turns a player question into one exchange with a character. The engine
builds the next transcript (persona message on first contact, then the
question), resends the whole transcript to the text-generation model,
parses the free-text reply and returns the extended transcript.

The engine never mutates session state. It returns a new ConversationLog and
the caller commits it, so a failed call leaves nothing behind.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from constants import LLM_TIMEOUT_SECONDS, MAX_CONCURRENT_LLM_CALLS
from exceptions import CollaboratorUnavailableError, LLMTimeoutError
from llm_prompt_core.parsing import parse_character_reply
from llm_prompt_core.prompts.builder import PromptBuilder
from llm_prompt_core.types import CharacterReply, ConversationLog, Message
from metrics import track_error, track_llm_call

if TYPE_CHECKING:
    from llm_prompt_core.models.base import BaseLLMModel
    from mysteries.base import CharacterProfile, Mystery

logger = logging.getLogger(__name__)


async def invoke_llm_async(model: BaseLLMModel, prompt: str, timeout: float) -> str:
    """
    Invoke the model without blocking the event loop.

    The blocking SDK call runs in the default executor. If the awaiting task
    is cancelled, or the timeout fires, the wait is abandoned; the worker
    thread finishes on its own under the SDK client's request timeout.

    Args:
        model: The text-generation model
        prompt: The serialised transcript
        timeout: Upper bound on the wait, in seconds

    Returns:
        The raw model reply

    Raises:
        LLMTimeoutError: If the model did not answer in time
        CollaboratorUnavailableError: If the model call failed
    """
    loop = asyncio.get_running_loop()
    model_name = getattr(model, "model_name", "unknown")
    start_time = time.time()

    try:
        with track_llm_call(provider=model._llm_type, model=model_name):
            return await asyncio.wait_for(
                loop.run_in_executor(None, lambda: model.generate_text(prompt)),
                timeout=timeout,
            )
    except asyncio.TimeoutError as e:
        track_error("llm_timeout")
        logger.warning("LLM call timed out after %.1fs (model=%s)", time.time() - start_time, model_name)
        raise LLMTimeoutError(timeout) from e
    except Exception as e:
        track_error("llm_call_error")
        logger.warning("LLM call failed (model=%s): %s", model_name, e)
        raise CollaboratorUnavailableError(f"Text generation failed: {e}") from e


class DialogueEngine:
    """Handles prompt construction and LLM-based dialogue generation."""

    def __init__(
        self,
        model: BaseLLMModel,
        timeout: float = LLM_TIMEOUT_SECONDS,
        max_concurrent_calls: int = MAX_CONCURRENT_LLM_CALLS,
    ) -> None:
        """
        Initialize the dialogue engine.

        Args:
            model: Text-generation model shared by every session
            timeout: Upper bound on one model call, in seconds
            max_concurrent_calls: Cap on model calls in flight across all sessions
        """
        self.model = model
        self.timeout = timeout
        self._call_slots = asyncio.Semaphore(max_concurrent_calls)

    async def ask(
        self,
        character: CharacterProfile,
        conversation: ConversationLog,
        question: str,
        mystery: Mystery,
    ) -> tuple[CharacterReply, ConversationLog]:
        """
        Ask a character one question.

        Args:
            character: The character being questioned
            conversation: The committed transcript with that character
            question: The player's question
            mystery: The mystery the character belongs to

        Returns:
            The parsed reply and the transcript extended with the question
            (and persona message on first contact) and the reply

        Raises:
            CollaboratorUnavailableError: If the model failed or timed out
        """
        pending = PromptBuilder.extend_with_question(conversation, character, mystery, question)

        async with self._call_slots:
            raw = await invoke_llm_async(self.model, pending.serialise(), self.timeout)

        reply = parse_character_reply(raw)
        logger.debug(
            "Character %s replied (emotion=%s, transcript=%d entries)",
            character.name,
            reply.emotion,
            len(pending) + 1,
        )

        extended = pending.append(
            Message(role="assistant", content=reply.response, emotion=reply.emotion)
        )
        return reply, extended

    async def check_availability(self) -> bool:
        """Probe the model without blocking the event loop."""
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, self.model.is_model_available),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("Model availability check failed: %s", e)
            return False
