"""Tests for AnswerComposer."""

from datetime import UTC, datetime, timedelta

import pytest

from studio_assistant.composer import AnswerComposer
from studio_assistant.composer.answer import CAVEAT
from studio_assistant.data import (
    ArticleCandidate,
    ClarificationOption,
    ClassificationResult,
    ConfidenceResult,
    ContentKind,
    Decision,
    EventCandidate,
    EvidenceCounts,
    Intent,
    ProductCandidate,
    RankedEvidence,
    ScoredCandidate,
)

APERTURE = ArticleCandidate(
    id="art-aperture",
    title="What is Aperture in Photography",
    url="https://www.alanranger.com/blog-on-photography/what-is-aperture-in-photography",
)
ASSIGNMENT = ArticleCandidate(
    id="art-aperture-assignment",
    title="Aperture Assignment for Beginners",
    url="https://www.alanranger.com/photography-assignments/aperture-assignment",
)
BLUEBELL_URL = "https://www.alanranger.com/photographic-workshops-near-me/bluebell-woodland"
TECHNICAL = ClassificationResult(intent=Intent.TECHNICAL, keywords=("aperture",))
EVENTS = ClassificationResult(intent=Intent.EVENTS, keywords=("bluebell",))


def scored(*candidates: object, rank: int = 10) -> tuple[ScoredCandidate, ...]:
    return tuple(
        ScoredCandidate(candidate=c, rank=rank - i)  # type: ignore[arg-type]
        for i, c in enumerate(candidates)
    )


def bluebell(day: int, **kwargs: object) -> EventCandidate:
    start = datetime(2027, 4, day, 5, 45, tzinfo=UTC)
    return EventCandidate(
        id=f"bluebell-{day}",
        title="Bluebell Woodland Photography Workshop",
        url=BLUEBELL_URL,
        start=start,
        end=start + timedelta(hours=9, minutes=15),
        **kwargs,  # type: ignore[arg-type]
    )


def confidence(value: float, decision: Decision = Decision.DIRECT) -> ConfidenceResult:
    return ConfidenceResult(confidence=value, decision=decision, counts=EvidenceCounts())


@pytest.fixture
def composer() -> AnswerComposer:
    return AnswerComposer()


class TestDirectAnswers:
    def test_technical_answer_leads_with_top_article(self, composer: AnswerComposer) -> None:
        ranked = RankedEvidence(articles=scored(APERTURE, ASSIGNMENT))
        response = composer.compose("what is aperture", TECHNICAL, confidence(0.87), ranked)

        assert response.type == "advice"
        assert response.answer.startswith(
            f"Here's our guide on that: What is Aperture in Photography ({APERTURE.url})."
        )
        assert "You may also find this article useful: Aperture Assignment" in response.answer
        assert CAVEAT not in response.answer
        assert response.options is None
        assert [a["title"] for a in response.structured.articles] == [
            APERTURE.title,
            ASSIGNMENT.title,
        ]

    def test_caveat_at_or_below_threshold(self, composer: AnswerComposer) -> None:
        ranked = RankedEvidence(articles=scored(APERTURE))
        for value in (0.7, 0.8):
            response = composer.compose("aperture tips", TECHNICAL, confidence(value), ranked)
            assert response.answer.endswith(CAVEAT)

    def test_nothing_to_say(self, composer: AnswerComposer) -> None:
        response = composer.compose("aperture", TECHNICAL, confidence(0.9), RankedEvidence())
        assert response.answer == "I couldn't find anything specific for that."

    def test_products_are_listed(self, composer: AnswerComposer) -> None:
        walk = ProductCandidate(
            id="walk", title="Coventry Photo Walk", url="https://x.com/walk", price_gbp=45.0
        )
        response = composer.compose(
            "photo walk", TECHNICAL, confidence(0.9), RankedEvidence(products=scored(walk))
        )
        assert response.structured.products == [
            {"title": "Coventry Photo Walk", "url": "https://x.com/walk", "price_gbp": 45.0}
        ]


class TestEventsAnswers:
    def test_lists_soonest_event_first(self, composer: AnswerComposer) -> None:
        first = bluebell(24, location="Chesterton Wood", price_gbp=125.0)
        second = bluebell(30)
        ranked = RankedEvidence(events=scored(second, first))
        response = composer.compose(
            "bluebell workshops", EVENTS, confidence(0.94, Decision.EVENTS), ranked
        )

        assert response.type == "events"
        assert response.answer == (
            "Upcoming Workshops: the next is Bluebell Woodland Photography Workshop on "
            "Sat 24 Apr 2027 at 05:45 in Chesterton Wood (£125). After that, Bluebell "
            "Woodland Photography Workshop on Fri 30 Apr 2027 at 05:45."
        )
        assert [e["start"] for e in response.structured.events] == [
            first.start.isoformat() if first.start else None,
            second.start.isoformat() if second.start else None,
        ]

    @pytest.mark.parametrize(
        ("query", "lead"),
        [
            ("when is the next course", "Upcoming Courses"),
            ("bluebell workshop dates", "Upcoming Workshops"),
            ("anything in snowdonia", "Upcoming Events"),
        ],
    )
    def test_lead_follows_query_wording(
        self, composer: AnswerComposer, query: str, lead: str
    ) -> None:
        ranked = RankedEvidence(events=scored(bluebell(24)))
        response = composer.compose(query, EVENTS, confidence(0.9, Decision.EVENTS), ranked)
        assert response.answer.startswith(f"{lead}: the next is")

    def test_no_events(self, composer: AnswerComposer) -> None:
        response = composer.compose(
            "bluebell walks", EVENTS, confidence(0.9, Decision.EVENTS), RankedEvidence()
        )
        assert response.answer == "Upcoming Events: I couldn't find anything specific for that."

    def test_event_display_cap(self, composer: AnswerComposer) -> None:
        ranked = RankedEvidence(events=scored(*(bluebell(day) for day in range(1, 13))))
        response = composer.compose(
            "bluebell workshops", EVENTS, confidence(0.9, Decision.EVENTS), ranked
        )
        assert len(response.structured.events) == 8

    def test_custom_display_limits(self) -> None:
        composer = AnswerComposer(display_limits={ContentKind.EVENT: 2})
        ranked = RankedEvidence(events=scored(*(bluebell(day) for day in range(1, 6))))
        assert len(composer.structured(ranked).events) == 2


class TestPills:
    def test_pills_are_capped(self, composer: AnswerComposer) -> None:
        ranked = RankedEvidence(events=scored(*(bluebell(day) for day in range(1, 10))))
        pills = composer.structured(ranked).pills
        assert len(pills) == 5
        assert pills[0] == {
            "label": "Bluebell Woodland Photography Workshop (01 Apr)",
            "url": BLUEBELL_URL,
        }

    def test_pills_are_deduplicated(self, composer: AnswerComposer) -> None:
        duplicate = ArticleCandidate(id="dup", title=APERTURE.title, url=APERTURE.url + "/")
        ranked = RankedEvidence(articles=scored(APERTURE, duplicate, ASSIGNMENT))
        pills = composer.structured(ranked).pills
        assert [p["label"] for p in pills] == [APERTURE.title, ASSIGNMENT.title]


class TestClarification:
    def test_clarification_response(self, composer: AnswerComposer) -> None:
        options = [ClarificationOption("1 day workshops", "1 day workshops")]
        response = composer.clarification("What type of workshop?", options, 0.1)

        assert response.type == "clarification"
        assert response.answer == "What type of workshop?"
        assert response.options is not None
        assert [(o.text, o.query) for o in response.options] == [
            ("1 day workshops", "1 day workshops")
        ]
        assert response.structured.events == []

    def test_generic_clarification(self, composer: AnswerComposer) -> None:
        response = composer.generic_clarification()
        assert response.ok
        assert response.confidence == 0.1
        assert response.options is not None
        assert [o.text for o in response.options][-1] == "About Alan Ranger"
