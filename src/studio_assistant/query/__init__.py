"""Query understanding."""

from studio_assistant.query.classifier import QueryClassifier
from studio_assistant.query.vocabulary import event_keywords, extract_keywords

__all__ = ["QueryClassifier", "event_keywords", "extract_keywords"]
