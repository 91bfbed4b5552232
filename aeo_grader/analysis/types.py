"""Core types and DTOs for per-query analysis and scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Sentiment(str, Enum):
    """Closed sentiment enum returned by the classifier."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


NO_SUMMARY = "No summary"
FAILED_SUMMARY = "Analysis failed"


@dataclass
class Verdict:
    """Analysis result for one query.

    ``brand_cited`` reflects the classifier's judgment that a citation
    marker or link is attached to the brand itself; it is not verified
    locally.
    """

    prompt: str = ""
    summary: str = NO_SUMMARY
    brand_mentioned: bool = False
    brand_cited: bool = False
    competitors_mentioned: list[str] = field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL
    # Set only by Verdict.failed; not part of the API payload
    degraded: bool = False

    @property
    def is_degraded(self) -> bool:
        return self.degraded

    @classmethod
    def failed(cls, prompt: str, reason: str = "") -> Verdict:
        """Neutral verdict produced when the answer or its analysis could not be obtained."""
        summary = f"{FAILED_SUMMARY}: {reason}" if reason else FAILED_SUMMARY
        return cls(prompt=prompt, summary=summary, degraded=True)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for the API."""
        return {
            "prompt": self.prompt,
            "summary": self.summary,
            "brand_mentioned": self.brand_mentioned,
            "brand_cited": self.brand_cited,
            "competitors_mentioned": list(self.competitors_mentioned),
            "sentiment": self.sentiment.value,
        }


@dataclass(frozen=True)
class Score:
    """Composite visibility score over a run's verdicts.

    ``overall`` is the plain mention rate (0–100). The four sub-scores form
    a separate 90-point decomposition and do not sum to ``overall``.
    """

    overall: int = 0  # 0..100
    recognition: int = 0  # 0..20
    market: int = 0  # 0..10
    quality: int = 0  # 0..20
    sentiment: int = 0  # 0..40
    total_queries: int = 0
    mentioned_count: int = 0
    cited_count: int = 0
    positive_count: int = 0

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "recognition": self.recognition,
            "market": self.market,
            "quality": self.quality,
            "sentiment": self.sentiment,
            "totalQueries": self.total_queries,
            "mentionedCount": self.mentioned_count,
            "citedCount": self.cited_count,
            "positiveCount": self.positive_count,
        }
