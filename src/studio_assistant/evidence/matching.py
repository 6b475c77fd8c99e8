"""Keyword matching against candidate text."""

from collections.abc import Sequence

from studio_assistant.data import Candidate
from studio_assistant.query.vocabulary import contains_term, fold_plural, tokenize


def candidate_text(candidate: Candidate) -> str:
    """Lower-cased searchable text of a candidate, URL punctuation flattened."""
    parts = [
        candidate.title,
        candidate.description,
        candidate.url,
        " ".join(candidate.categories),
        " ".join(candidate.tags),
        getattr(candidate, "location", ""),
    ]
    text = " ".join(p for p in parts if p).lower()
    for ch in "-/_.":
        text = text.replace(ch, " ")
    return " ".join(text.split())


def matched_keywords(candidate: Candidate, keywords: Sequence[str]) -> list[str]:
    """Keywords found in the candidate, with plural folding for single words."""
    text = candidate_text(candidate)
    tokens = {fold_plural(t) for t in tokenize(text)}
    found = []
    for keyword in keywords:
        if " " in keyword:
            if contains_term(text, keyword):
                found.append(keyword)
        elif fold_plural(keyword) in tokens:
            found.append(keyword)
    return found


def matches_any(candidate: Candidate, keywords: Sequence[str]) -> bool:
    """Coarse keyword overlap. An empty keyword list matches everything."""
    if not keywords:
        return True
    return bool(matched_keywords(candidate, keywords))
