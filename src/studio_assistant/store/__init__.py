"""Content store collaborators."""

from studio_assistant.store.base import ContentStore
from studio_assistant.store.memory import InMemoryContentStore
from studio_assistant.store.rows import parse_rows
from studio_assistant.store.supabase import SupabaseContentStore

__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "SupabaseContentStore",
    "parse_rows",
]
