"""Transport-agnostic request/response contract."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ResponseType = Literal["advice", "events", "clarification", "error"]


class ChatRequest(BaseModel):
    """Incoming question. Accepts both snake_case and the camelCase wire names."""

    query: str
    session_id: str | None = Field(default=None, alias="sessionId")
    previous_query: str | None = Field(default=None, alias="previousQuery")
    page_context: dict[str, Any] | None = Field(default=None, alias="pageContext")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("query")
    @classmethod
    def query_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be empty")
        return v.strip()


class OptionPayload(BaseModel):
    text: str
    query: str

    model_config = ConfigDict(frozen=True)


class StructuredResults(BaseModel):
    """Typed arrays of matched content, already capped for display."""

    articles: list[dict[str, Any]] = Field(default_factory=list)
    events: list[dict[str, Any]] = Field(default_factory=list)
    products: list[dict[str, Any]] = Field(default_factory=list)
    services: list[dict[str, Any]] = Field(default_factory=list)
    pills: list[dict[str, str]] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Outgoing answer. Always well-formed, even on degraded paths."""

    ok: bool = True
    type: ResponseType
    confidence: float = Field(ge=0.0, le=1.0)
    answer: str
    options: list[OptionPayload] | None = None
    structured: StructuredResults = Field(default_factory=StructuredResults)

    @classmethod
    def rejected(cls, message: str) -> "ChatResponse":
        """Response for a request that was refused before reaching the engine."""
        return cls(ok=False, type="error", confidence=0.0, answer=message)
