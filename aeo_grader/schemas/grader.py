"""Pydantic schemas for the grader API.

Request fields that are "required" by the API contract are declared
optional here so that a missing value is answered with a 400 ``{error}``
by the endpoint, not a framework validation error.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from aeo_grader.core.config import settings

# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class GeneratePromptsRequest(BaseModel):
    """Input for query generation."""

    model_config = ConfigDict(populate_by_name=True)

    niche: str | None = Field(None, max_length=255, description="Industry / niche (required)")
    location: str | None = Field("", max_length=255, description="Geographic focus; empty → worldwide")
    num_prompts: int | None = Field(
        None,
        alias="numPrompts",
        ge=1,
        le=settings.max_num_prompts,
        description="How many queries to generate (default 5)",
    )


class AnalyzeRequest(BaseModel):
    """Input for analyzing a single query."""

    prompt: str | None = Field(None, description="Query to send to the answer engine (required)")
    brand: str | None = Field(None, description="Target brand name (required)")
    competitors: list[str | None] | None = Field(None, description="Competitor brand names; blank entries are ignored")


class GradeRequest(BaseModel):
    """Input for a full grading run."""

    model_config = ConfigDict(populate_by_name=True)

    brand: str | None = Field(None, max_length=255, description="Target brand name (required)")
    niche: str | None = Field(None, max_length=255, description="Industry / niche (required)")
    competitors: list[str | None] | str | None = Field(
        None,
        description="Competitor names as a list or a comma-separated string",
    )
    location: str | None = Field("", max_length=255)
    num_prompts: int = Field(3, alias="numPrompts", ge=1, le=settings.max_num_prompts)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class GeneratePromptsResponse(BaseModel):
    prompts: list[str]


class VerdictResponse(BaseModel):
    """Per-query classification result."""

    prompt: str
    summary: str
    brand_mentioned: bool
    brand_cited: bool
    competitors_mentioned: list[str]
    sentiment: str


class ScoreResponse(BaseModel):
    """Composite visibility score."""

    overall: int
    recognition: int
    market: int
    quality: int
    sentiment: int
    totalQueries: int
    mentionedCount: int
    citedCount: int
    positiveCount: int


class GradeResponse(BaseModel):
    prompts: list[str]
    results: list[VerdictResponse]
    scores: ScoreResponse | None
    cancelled: bool = False


class ErrorResponse(BaseModel):
    error: str
