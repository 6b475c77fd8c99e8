"""Clarification dialogue."""

from studio_assistant.dialogue.manager import (
    ClarificationManager,
    ClarificationTurn,
    DialogueState,
    Resolution,
)
from studio_assistant.dialogue.options import DURATION_OPTIONS, GENERIC_OPTIONS, build_options

__all__ = [
    "ClarificationManager",
    "ClarificationTurn",
    "DURATION_OPTIONS",
    "DialogueState",
    "GENERIC_OPTIONS",
    "Resolution",
    "build_options",
]
