# src/scoreforge/schemas/problem.py

"""Problem details body returned for every error response."""

from pydantic import BaseModel, Field


class ProblemDetails(BaseModel):
    """An RFC 9457 problem document.

    Attributes:
        type: URI identifying the problem type ("about:blank" for plain HTTP
            status semantics)
        title: Short summary, the HTTP reason phrase
        status: HTTP status code
        detail: Human-readable explanation of this occurrence
        instance: Request path the problem occurred on
        error_type: Extension member naming the internal error class
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: str
    error_type: str | None = Field(default=None, serialization_alias="errorType")
