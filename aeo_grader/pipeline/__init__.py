"""Grading pipeline: generate queries, analyze each one, aggregate a score."""

from aeo_grader.pipeline.orchestrator import VisibilityPipeline
from aeo_grader.pipeline.state import InvalidTransition
from aeo_grader.pipeline.types import (
    CancellationToken,
    PipelineResult,
    PipelineStage,
    PipelineState,
    Progress,
    RunConfig,
    parse_competitors,
)

__all__ = [
    "CancellationToken",
    "InvalidTransition",
    "PipelineResult",
    "PipelineStage",
    "PipelineState",
    "Progress",
    "RunConfig",
    "VisibilityPipeline",
    "parse_competitors",
]
