"""Pipeline protocol for answering one chat turn."""

from typing import Protocol

from studio_assistant.data import ChatRequest, ChatResponse


class AssistantPipeline(Protocol):
    """Interface for end-to-end question answering."""

    async def answer(self, request: ChatRequest) -> ChatResponse:
        """Answer one turn.

        Args:
            request: The validated incoming request.

        Returns:
            A well-formed response; degraded paths answer with a clarification.
        """
        ...
