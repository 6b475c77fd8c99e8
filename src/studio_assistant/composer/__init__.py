"""Answer composition."""

from studio_assistant.composer.answer import AnswerComposer

__all__ = ["AnswerComposer"]
