"""Shared fixtures: a fixed clock and the sample catalog."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from studio_assistant.store import InMemoryContentStore

NOW = datetime(2027, 1, 4, 9, 0, tzinfo=UTC)  # a Monday
CATALOG_PATH = Path(__file__).parent.parent / "configs" / "sample_catalog.yaml"


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return fixed_clock


@pytest.fixture
def catalog_store() -> InMemoryContentStore:
    """The sample catalog as seen on ``NOW``."""
    return InMemoryContentStore.from_file(CATALOG_PATH, clock=fixed_clock)
