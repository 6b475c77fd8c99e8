"""Tests for AnswerPipeline over the sample catalog."""

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from studio_assistant.config import AssistantConfig, create_pipeline
from studio_assistant.data import ChatRequest, ChatResponse
from studio_assistant.dialogue import DURATION_OPTIONS, GENERIC_OPTIONS
from studio_assistant.evidence import EvidenceGatherer
from studio_assistant.pipeline import AssistantPipeline
from studio_assistant.run_logger import TurnLogger
from studio_assistant.session import MemorySessionStore
from studio_assistant.store import InMemoryContentStore

GENERIC_LABELS = [o.text for o in GENERIC_OPTIONS]


class BrokenStore:
    async def _fail(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        raise ConnectionError("content store unavailable")

    fetch_articles = _fail
    fetch_events = _fail
    fetch_products = _fail
    fetch_services = _fail


def option_labels(response: ChatResponse) -> list[str]:
    return [o.text for o in response.options or []]


@pytest.fixture
def sessions() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def pipeline(
    catalog_store: InMemoryContentStore,
    sessions: MemorySessionStore,
    clock: Callable[[], datetime],
) -> AssistantPipeline:
    return create_pipeline(AssistantConfig(), catalog_store, sessions, clock=clock)


class TestClarificationFlow:
    async def test_broad_query_gets_options(self, pipeline: AssistantPipeline) -> None:
        response = await pipeline.answer(
            ChatRequest(query="photography workshops", session_id="s1")
        )

        assert response.ok
        assert response.type == "clarification"
        assert response.confidence == 0.1
        assert response.answer.startswith("What type of workshop are you planning?")
        assert option_labels(response) == [
            *(o.label for o in DURATION_OPTIONS),
            "Bluebell workshops",
            "Woodland workshops",
            "Autumn workshops",
        ]

    async def test_selected_option_answers_with_events(
        self, pipeline: AssistantPipeline, sessions: MemorySessionStore
    ) -> None:
        await pipeline.answer(ChatRequest(query="photography workshops", session_id="s1"))
        response = await pipeline.answer(ChatRequest(query="1 day workshops", session_id="s1"))

        assert response.type == "events"
        assert response.confidence > 0.8
        assert response.options is None
        assert response.answer.startswith(
            "Upcoming Workshops: the next is Bluebell Woodland Photography Workshop on "
            "Sat 24 Apr 2027 at 05:45 in Chesterton Wood, Warwickshire (£125)."
        )
        titles = [e["title"] for e in response.structured.events]
        assert titles == [
            "Bluebell Woodland Photography Workshop",
            "Bluebell Woodland Photography Workshop",
            "Exmoor Coast Landscape Photography Workshop",
            "Batsford Arboretum Autumn Photography Workshop",
        ]
        assert len(sessions) == 0

    async def test_short_workshops_list_sessions(self, pipeline: AssistantPipeline) -> None:
        response = await pipeline.answer(ChatRequest(query="2.5hr - 4hr workshops"))

        assert response.type == "events"
        events = response.structured.events
        assert len(events) == 8
        assert all(e["duration_hours"] <= 4 for e in events)
        assert {e["session"] for e in events} == {"early", "late", None}

    async def test_depth_is_bounded(self, pipeline: AssistantPipeline) -> None:
        request = ChatRequest(query="photography workshops", session_id="s1")
        first = await pipeline.answer(request)
        second = await pipeline.answer(request)
        await pipeline.answer(request)
        fourth = await pipeline.answer(request)

        assert not set(option_labels(first)) & set(option_labels(second))
        assert option_labels(fourth) == GENERIC_LABELS


class TestDirectAnswers:
    async def test_technical_question(self, pipeline: AssistantPipeline) -> None:
        response = await pipeline.answer(ChatRequest(query="what is aperture"))

        assert response.type == "advice"
        assert response.answer.startswith(
            "Here's our guide on that: What is Aperture in Photography"
        )
        assert "not completely sure" not in response.answer
        assert response.structured.articles[0]["title"] == "What is Aperture in Photography"
        assert len(response.structured.pills) <= 5


class TestDegradedPaths:
    async def test_store_outage_asks_generic_question(
        self, sessions: MemorySessionStore, clock: Callable[[], datetime]
    ) -> None:
        pipeline = create_pipeline(AssistantConfig(), BrokenStore(), sessions, clock=clock)
        response = await pipeline.answer(ChatRequest(query="what is aperture"))

        assert response.ok
        assert response.type == "clarification"
        assert option_labels(response) == GENERIC_LABELS

    async def test_unexpected_error_gives_generic_menu(
        self, pipeline: AssistantPipeline, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def boom(*args: object, **kwargs: object) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(EvidenceGatherer, "gather", boom)
        response = await pipeline.answer(ChatRequest(query="what is aperture"))

        assert response.ok
        assert response.type == "clarification"
        assert response.confidence == 0.1
        assert option_labels(response) == GENERIC_LABELS

    async def test_logger_failure_does_not_affect_response(
        self,
        catalog_store: InMemoryContentStore,
        sessions: MemorySessionStore,
        clock: Callable[[], datetime],
    ) -> None:
        turn_logger = MagicMock(spec=TurnLogger)
        turn_logger.finish_turn.side_effect = OSError("disk full")
        pipeline = create_pipeline(
            AssistantConfig(), catalog_store, sessions, turn_logger=turn_logger, clock=clock
        )
        response = await pipeline.answer(ChatRequest(query="what is aperture"))

        assert response.type == "advice"
        turn_logger.finish_turn.assert_called_once()


class TestTurnLog:
    async def test_turn_is_logged_with_stages(
        self,
        tmp_path: Path,
        catalog_store: InMemoryContentStore,
        sessions: MemorySessionStore,
        clock: Callable[[], datetime],
    ) -> None:
        turn_logger = TurnLogger(log_dir=tmp_path)
        pipeline = create_pipeline(
            AssistantConfig(), catalog_store, sessions, turn_logger=turn_logger, clock=clock
        )
        await pipeline.answer(ChatRequest(query="what is aperture", session_id="s9"))

        [line] = (tmp_path / "interactions.jsonl").read_text().splitlines()
        record = json.loads(line)
        assert record["session_id"] == "s9"
        assert record["response_type"] == "advice"
        assert [s["stage"] for s in record["stages"]] == [
            "dialogue",
            "classification",
            "evidence",
            "ranking",
            "confidence",
            "composition",
        ]
        assert record["stages"][1]["summary"]["intent"] == "technical_advice"
