"""Clarification session state storage."""

from studio_assistant.session.base import SessionStore
from studio_assistant.session.memory import MemorySessionStore

__all__ = ["MemorySessionStore", "SessionStore"]
