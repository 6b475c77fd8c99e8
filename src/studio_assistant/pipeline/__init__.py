"""Pipelines that answer one chat turn."""

from studio_assistant.pipeline.assistant import AnswerPipeline
from studio_assistant.pipeline.base import AssistantPipeline

__all__ = ["AnswerPipeline", "AssistantPipeline"]
