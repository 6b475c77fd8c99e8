"""Turn logger for recording answered queries to a JSON-lines file."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from studio_assistant.data import ChatResponse, Query


class StageRecord(BaseModel):
    """Record of a single stage of one turn."""

    stage: str
    component: str
    summary: Any = None
    duration_ms: float = 0.0


class TurnRecord(BaseModel):
    """Record of one answered query."""

    turn_id: str
    session_id: str | None = None
    query: str
    previous_query: str | None = None
    started_at: str
    completed_at: str | None = None
    response_type: str = ""
    confidence: float = 0.0
    answer: str = ""
    option_count: int = 0
    response_time_ms: float = 0.0
    stages: list[StageRecord] = []


def _serialize(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Handles dataclasses, Pydantic models, enums, dates, sets, tuples, lists,
    dicts and primitives.
    """
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(_serialize(item) for item in obj)
    if isinstance(obj, dict):
        return {str(k): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class TurnLogger:
    """Builds one record per turn and appends it to ``interactions.jsonl``.

    Records are returned to the caller rather than held on the logger, so
    concurrent turns never share state. When ``enabled=False``, all methods
    are no-ops.

    Args:
        log_dir: Directory holding the interactions file.
        enabled: If False, all methods become no-ops.
    """

    FILENAME = "interactions.jsonl"

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the interactions file once a turn was written, or None."""
        return self._last_log_path

    def start_turn(self, query: Query) -> TurnRecord | None:
        """Create the record for a new turn.

        Args:
            query: The incoming query.

        Returns:
            The turn record, or None if logging is disabled.
        """
        if not self._enabled:
            return None

        return TurnRecord(
            turn_id=str(uuid.uuid4()),
            session_id=query.session_id,
            query=query.text,
            previous_query=query.previous_query,
            started_at=datetime.now(tz=UTC).isoformat(),
        )

    def log_stage(
        self,
        record: TurnRecord | None,
        stage: str,
        component: str,
        summary: Any,
        duration_seconds: float,
    ) -> None:
        """Append a stage record to a turn.

        Args:
            record: Record returned by ``start_turn``.
            stage: Stage name (e.g. "classification", "evidence").
            component: Component class name.
            summary: Stage output or a summary of it (will be serialized).
            duration_seconds: Wall-clock time for this stage.
        """
        if not self._enabled or record is None:
            return

        record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                summary=_serialize(summary),
                duration_ms=round(duration_seconds * 1000, 2),
            )
        )

    def finish_turn(
        self, record: TurnRecord | None, response: ChatResponse, response_time_seconds: float
    ) -> Path | None:
        """Append the turn record as one JSON line.

        Args:
            record: Record returned by ``start_turn``.
            response: The response returned to the caller.
            response_time_seconds: Wall-clock time for the whole turn.

        Returns:
            Path to the interactions file, or None if logging is disabled.
        """
        if not self._enabled or record is None:
            return None

        record.completed_at = datetime.now(tz=UTC).isoformat()
        record.response_type = response.type
        record.confidence = response.confidence
        record.answer = response.answer
        record.option_count = len(response.options or [])
        record.response_time_ms = round(response_time_seconds * 1000, 2)

        self._log_dir.mkdir(parents=True, exist_ok=True)
        filepath = self._log_dir / self.FILENAME
        with filepath.open("a", encoding="utf-8") as f:
            f.write(record.model_dump_json() + "\n")
        self._last_log_path = filepath
        return filepath
