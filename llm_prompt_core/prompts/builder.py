"""
Prompt builder for character transcripts.

This module provides the PromptBuilder class, which turns a character
profile and the mystery facts into the messages that make up a transcript.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_prompt_core.prompts.templates import (
    first_question_template,
    follow_up_question_template,
    json_contract,
    no_knowledge_text,
    persona_template,
    reliable_note,
    unreliable_note,
)
from llm_prompt_core.types import ConversationLog, Message
from llm_prompt_core.utils import list_to_conjunction

if TYPE_CHECKING:
    from mysteries.base import CharacterProfile, Mystery


class PromptBuilder:
    """
    Builder class for the entries of a character transcript.

    Provides methods to build:
    - The persona/system message (once per character per session)
    - Player question entries (first contact and follow-ups)
    """

    @staticmethod
    def build_persona(character: CharacterProfile, mystery: Mystery, question: str) -> str:
        """
        Build the persona/system prompt for a character.

        Every character gets the ground truth (location, weapon, killer), not
        just the real killer, because any of them may need to reason about it.

        Args:
            character: The character being questioned
            mystery: The mystery the character belongs to
            question: The player's first question

        Returns:
            Formatted persona prompt
        """
        knowledge = list_to_conjunction(list(character.knowledge)) or no_knowledge_text
        return persona_template.format(
            name=character.name,
            personality=character.personality,
            reliability_note=reliable_note if character.reliable else unreliable_note,
            location=mystery.location,
            weapon=mystery.weapon,
            killer=mystery.killer,
            knowledge=knowledge,
            json_contract=json_contract,
            question=question,
        )

    @staticmethod
    def build_question(question: str, first_contact: bool) -> str:
        """Build the user entry for a question."""
        if first_contact:
            return first_question_template.format(question=question)
        return follow_up_question_template.format(question=question)

    @classmethod
    def extend_with_question(
        cls,
        conversation: ConversationLog,
        character: CharacterProfile,
        mystery: Mystery,
        question: str,
    ) -> ConversationLog:
        """
        Return the transcript with the player's question appended.

        On first contact the persona message is prepended first, so it is
        always the opening entry and is created exactly once.
        """
        first_contact = conversation.is_initial_message()
        if first_contact:
            conversation = conversation.append(
                Message(role="system", content=cls.build_persona(character, mystery, question))
            )
        return conversation.append(
            Message(role="user", content=cls.build_question(question, first_contact))
        )
