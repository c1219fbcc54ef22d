"""
Prompt templates and builders for character interrogation.

This module contains the prompt templates and utilities for building the
transcript entries sent to the text-generation collaborator.
"""

from llm_prompt_core.prompts.builder import PromptBuilder
from llm_prompt_core.prompts.templates import (
    first_question_template,
    follow_up_question_template,
    json_contract,
    persona_template,
    reliable_note,
    unreliable_note,
)

__all__ = [
    "PromptBuilder",
    "first_question_template",
    "follow_up_question_template",
    "json_contract",
    "persona_template",
    "reliable_note",
    "unreliable_note",
]
