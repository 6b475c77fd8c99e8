"""Templated answer composition."""

import re
from collections.abc import Sequence
from typing import Any

from studio_assistant.data import (
    ArticleCandidate,
    Candidate,
    ChatResponse,
    ClarificationOption,
    ClassificationResult,
    ConfidenceResult,
    ContentKind,
    Decision,
    EventCandidate,
    Intent,
    OptionPayload,
    ProductCandidate,
    RankedEvidence,
    StructuredResults,
)
from studio_assistant.dialogue.options import GENERIC_OPTIONS

DEFAULT_DISPLAY_LIMITS: dict[ContentKind, int] = {
    ContentKind.ARTICLE: 5,
    ContentKind.EVENT: 8,
    ContentKind.PRODUCT: 5,
    ContentKind.SERVICE: 5,
}

CAVEAT = (
    "I'm not completely sure this is exactly what you meant, "
    "so let me know if you'd like something more specific."
)
NO_MATCH = "I couldn't find anything specific for that."
GENERIC_QUESTION = "I'm not sure I understood. Which of these areas can I help with?"


def _event_lead(query_text: str) -> str:
    text = query_text.lower()
    if re.search(r"\b(course|courses|class|classes)\b", text):
        return "Upcoming Courses"
    if re.search(r"\bworkshops?\b", text):
        return "Upcoming Workshops"
    return "Upcoming Events"


def _when(event: EventCandidate) -> str:
    if event.start is None:
        return "a date to be confirmed"
    when = event.start.strftime("%a %d %b %Y")
    if event.start.hour or event.start.minute:
        when += event.start.strftime(" at %H:%M")
    return when


def _price(value: float | None) -> str:
    return f" (£{value:g})" if value is not None else ""


def article_payload(article: Candidate) -> dict[str, Any]:
    return {
        "title": article.title,
        "url": article.url,
        "description": article.description[:240],
        "categories": list(article.categories),
        "publish_date": article.publish_date.date().isoformat() if article.publish_date else None,
    }


def event_payload(event: EventCandidate) -> dict[str, Any]:
    return {
        "title": event.title,
        "url": event.url,
        "start": event.start.isoformat() if event.start else None,
        "end": event.end.isoformat() if event.end else None,
        "duration_hours": event.duration_hours,
        "location": event.location,
        "price_gbp": event.price_gbp,
        "product_url": event.product_url or None,
        "session": event.session or None,
    }


def product_payload(product: ProductCandidate) -> dict[str, Any]:
    return {"title": product.title, "url": product.url, "price_gbp": product.price_gbp}


def service_payload(service: Candidate) -> dict[str, Any]:
    return {"title": service.title, "url": service.url, "description": service.description[:240]}


class AnswerComposer:
    """Assembles the structured response for a terminal or clarifying turn.

    Args:
        display_limits: Maximum entries shown per content kind.
        max_pills: Maximum quick-navigation links.
        caveat_below: Answers at or below this confidence get a caveat sentence.
    """

    def __init__(
        self,
        *,
        display_limits: dict[ContentKind, int] | None = None,
        max_pills: int = 5,
        caveat_below: float = 0.8,
    ) -> None:
        self._limits = {**DEFAULT_DISPLAY_LIMITS, **(display_limits or {})}
        self._max_pills = max_pills
        self._caveat_below = caveat_below

    def compose(
        self,
        query_text: str,
        classification: ClassificationResult,
        confidence: ConfidenceResult,
        ranked: RankedEvidence,
    ) -> ChatResponse:
        """Compose a direct or events answer."""
        structured = self.structured(ranked)
        if confidence.decision == Decision.EVENTS:
            answer = self._events_answer(query_text, self._events(ranked))
            response_type = "events"
        else:
            answer = self._direct_answer(classification.intent, ranked)
            response_type = "advice"
        if confidence.confidence <= self._caveat_below:
            answer = f"{answer} {CAVEAT}"
        return ChatResponse(
            type=response_type,
            confidence=confidence.confidence,
            answer=answer,
            structured=structured,
        )

    def clarification(
        self,
        question: str,
        options: Sequence[ClarificationOption],
        confidence: float,
        ranked: RankedEvidence | None = None,
    ) -> ChatResponse:
        return ChatResponse(
            type="clarification",
            confidence=confidence,
            answer=question,
            options=[OptionPayload(text=o.text, query=o.query) for o in options],
            structured=self.structured(ranked) if ranked else StructuredResults(),
        )

    def generic_clarification(self) -> ChatResponse:
        """The only user-visible failure state: the generic menu."""
        return self.clarification(GENERIC_QUESTION, GENERIC_OPTIONS, confidence=0.1)

    def structured(self, ranked: RankedEvidence) -> StructuredResults:
        articles = [s.candidate for s in ranked.articles[: self._limits[ContentKind.ARTICLE]]]
        products = [s.candidate for s in ranked.products[: self._limits[ContentKind.PRODUCT]]]
        services = [s.candidate for s in ranked.services[: self._limits[ContentKind.SERVICE]]]
        events = self._events(ranked)
        return StructuredResults(
            articles=[article_payload(a) for a in articles],
            events=[event_payload(e) for e in events],
            products=[product_payload(p) for p in products if isinstance(p, ProductCandidate)],
            services=[service_payload(s) for s in services],
            pills=self._pills(ranked, events),
        )

    def _events(self, ranked: RankedEvidence) -> list[EventCandidate]:
        events = [s.candidate for s in ranked.events if isinstance(s.candidate, EventCandidate)]
        events.sort(key=lambda e: (e.start.isoformat() if e.start else "", e.url, e.session))
        return events[: self._limits[ContentKind.EVENT]]

    def _pills(
        self, ranked: RankedEvidence, events: list[EventCandidate]
    ) -> list[dict[str, str]]:
        candidates: list[tuple[str, str]] = []
        for event in events:
            label = event.title
            if event.start is not None:
                label = f"{event.title} ({event.start:%d %b})"
            candidates.append((label, event.url))
        for scored in (*ranked.articles, *ranked.services):
            candidates.append((scored.candidate.title, scored.candidate.url))

        pills: list[dict[str, str]] = []
        seen: set[tuple[str, str]] = set()
        for label, url in candidates:
            key = (label.lower(), url.lower().rstrip("/"))
            if key in seen or not label or not url:
                continue
            seen.add(key)
            pills.append({"label": label, "url": url})
            if len(pills) >= self._max_pills:
                break
        return pills

    def _events_answer(self, query_text: str, events: list[EventCandidate]) -> str:
        lead = _event_lead(query_text)
        if not events:
            return f"{lead}: {NO_MATCH}"
        first = events[0]
        where = f" in {first.location}" if first.location else ""
        price = _price(first.price_gbp)
        answer = f"{lead}: the next is {first.title} on {_when(first)}{where}{price}."
        if len(events) > 1:
            second = events[1]
            answer += f" After that, {second.title} on {_when(second)}."
        return answer

    def _direct_answer(self, intent: Intent, ranked: RankedEvidence) -> str:
        top = ranked.top(2)
        if not top:
            return NO_MATCH
        first = top[0]
        templates = {
            Intent.TECHNICAL: "Here's our guide on that: {title} ({url}).",
            Intent.EQUIPMENT: "For equipment advice, start with {title} ({url}).",
            Intent.SERVICES: "{title} looks like the best fit for what you're after ({url}).",
            Intent.ABOUT: "You can read more about Alan and the business here: {title} ({url}).",
            Intent.EVENTS: "The closest match is {title} ({url}).",
        }
        template = templates.get(intent, "The most relevant match is {title} ({url}).")
        answer = template.format(title=first.title, url=first.url)
        if len(top) > 1:
            second = top[1]
            noun = "article" if isinstance(second, ArticleCandidate) else second.kind.value
            answer += f" You may also find this {noun} useful: {second.title}."
        return answer
