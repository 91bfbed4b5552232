"""Pure transition functions for PipelineState.

  IDLE ─start_generation→ GENERATING_QUERIES ─queries_generated→ ANALYZING_QUERIES
       ←generation_failed─                                     │
  IDLE ←────────────── cancelled / reset ────────────────────── │ ─analysis_complete→ COMPLETE

Each function takes a state and returns a new one; nothing is mutated.
Calling a transition from the wrong stage raises InvalidTransition.
"""

from __future__ import annotations

from dataclasses import replace

from aeo_grader.analysis.types import Score, Verdict
from aeo_grader.pipeline.types import PipelineStage, PipelineState, Progress


class InvalidTransition(RuntimeError):
    """A transition was requested from a stage that does not allow it."""


def _require(state: PipelineState, *stages: PipelineStage) -> None:
    if state.stage not in stages:
        allowed = ", ".join(s.value for s in stages)
        raise InvalidTransition(f"Cannot transition from {state.stage.value} (expected {allowed})")


def reject_config(state: PipelineState, message: str) -> PipelineState:
    """Invalid submission: stay idle and surface the validation message."""
    _require(state, PipelineStage.IDLE)
    return replace(state, error=message)


def start_generation(state: PipelineState) -> PipelineState:
    _require(state, PipelineStage.IDLE)
    return PipelineState(
        stage=PipelineStage.GENERATING_QUERIES,
        progress=Progress(current=0, total=1, label="Generating search queries..."),
    )


def generation_failed(state: PipelineState, message: str) -> PipelineState:
    _require(state, PipelineStage.GENERATING_QUERIES)
    return PipelineState(stage=PipelineStage.IDLE, error=message)


def queries_generated(state: PipelineState, queries: list[str]) -> PipelineState:
    _require(state, PipelineStage.GENERATING_QUERIES)
    if not queries:
        raise InvalidTransition("Cannot start analysis without queries")
    return replace(
        state,
        stage=PipelineStage.ANALYZING_QUERIES,
        queries=tuple(queries),
        progress=Progress(current=0, total=len(queries), label="Queries generated!"),
    )


def query_started(state: PipelineState, index: int) -> PipelineState:
    _require(state, PipelineStage.ANALYZING_QUERIES)
    total = len(state.queries)
    return replace(
        state,
        progress=Progress(
            current=index,
            total=total,
            label=f"Analyzing query {index + 1} of {total}...",
        ),
    )


def verdict_received(state: PipelineState, verdict: Verdict) -> PipelineState:
    _require(state, PipelineStage.ANALYZING_QUERIES)
    return replace(state, verdicts=state.verdicts + (verdict,))


def analysis_complete(state: PipelineState, score: Score) -> PipelineState:
    _require(state, PipelineStage.ANALYZING_QUERIES)
    total = len(state.queries)
    return replace(
        state,
        stage=PipelineStage.COMPLETE,
        score=score,
        progress=Progress(current=total, total=total, label="Analysis complete!"),
    )


def cancelled(state: PipelineState) -> PipelineState:
    """Cancellation discards the run state and returns to idle."""
    return PipelineState.initial()


def reset(state: PipelineState) -> PipelineState:
    """Explicit reset: drop verdicts, score, progress and any error."""
    return PipelineState.initial()
