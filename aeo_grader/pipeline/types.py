"""Core types for the grading pipeline: run config, stages, state, result."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from aeo_grader.analysis.types import Score, Verdict
from aeo_grader.prompt_engine.generator import DEFAULT_LOCATION

DEFAULT_NUM_PROMPTS = 3


def parse_competitors(raw: str | list[str | None] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Split a comma-separated competitor string (or list) into clean names.

    Order is kept; blanks, nulls and case-insensitive duplicates are dropped.
    """
    if not raw:
        return ()
    parts = raw.split(",") if isinstance(raw, str) else raw
    seen: set[str] = set()
    result: list[str] = []
    for part in parts:
        if part is None:
            continue
        name = str(part).strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            result.append(name)
    return tuple(result)


@dataclass(frozen=True)
class RunConfig:
    """User-supplied parameters of one grading run. Immutable for the run."""

    brand: str = ""
    competitors: tuple[str, ...] = ()
    niche: str = ""
    location: str = DEFAULT_LOCATION
    num_prompts: int = DEFAULT_NUM_PROMPTS

    @classmethod
    def create(
        cls,
        brand: str,
        niche: str,
        competitors: str | list[str] | tuple[str, ...] | None = None,
        location: str = "",
        num_prompts: int = DEFAULT_NUM_PROMPTS,
    ) -> RunConfig:
        return cls(
            brand=(brand or "").strip(),
            competitors=parse_competitors(competitors),
            niche=(niche or "").strip(),
            location=(location or "").strip() or DEFAULT_LOCATION,
            num_prompts=num_prompts,
        )

    def validate(self) -> str | None:
        """Return a user-facing error message, or None if the config is usable."""
        if not self.brand.strip() or not self.niche.strip():
            return "Please fill in your Brand name and Industry/Niche."
        if isinstance(self.num_prompts, bool) or not isinstance(self.num_prompts, int) or self.num_prompts < 1:
            return "Number of prompts must be a positive integer."
        return None


class PipelineStage(str, Enum):
    """Workflow stages. Cancellation and failures lead back to IDLE."""

    IDLE = "idle"
    GENERATING_QUERIES = "generating_queries"
    ANALYZING_QUERIES = "analyzing_queries"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0
    label: str = ""


@dataclass(frozen=True)
class PipelineState:
    """Transient state of one run. Replaced, never mutated."""

    stage: PipelineStage = PipelineStage.IDLE
    progress: Progress = field(default_factory=Progress)
    queries: tuple[str, ...] = ()
    verdicts: tuple[Verdict, ...] = ()
    score: Score | None = None
    error: str = ""

    @classmethod
    def initial(cls) -> PipelineState:
        return cls()


@dataclass
class PipelineResult:
    """What a run hands back to its caller."""

    queries: list[str] = field(default_factory=list)
    verdicts: list[Verdict] = field(default_factory=list)
    score: Score | None = None
    cancelled: bool = False
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and self.score is not None

    def to_dict(self) -> dict:
        return {
            "prompts": list(self.queries),
            "results": [v.to_dict() for v in self.verdicts],
            "scores": self.score.to_dict() if self.score else None,
            "cancelled": self.cancelled,
        }


class CancellationToken:
    """Cooperative cancellation flag, polled between pipeline steps.

    Setting it never interrupts an in-flight gateway call.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
