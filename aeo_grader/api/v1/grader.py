"""API endpoints for the AEO grader.

Provides:
  - POST /generate-prompts — generate search queries for a niche
  - POST /analyze — answer one query and classify the answer for a brand
  - POST /grade — full run: generate, analyze each query, score
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from aeo_grader.analysis.analyzer import analyze_query
from aeo_grader.core.config import settings
from aeo_grader.core.dependencies import get_gateway
from aeo_grader.pipeline import RunConfig, VisibilityPipeline
from aeo_grader.prompt_engine.generator import generate_queries
from aeo_grader.schemas.grader import (
    AnalyzeRequest,
    ErrorResponse,
    GeneratePromptsRequest,
    GeneratePromptsResponse,
    GradeRequest,
    GradeResponse,
    VerdictResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["grader"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/generate-prompts",
    response_model=GeneratePromptsResponse,
    responses=_ERROR_RESPONSES,
)
async def generate_prompts(body: GeneratePromptsRequest, gateway=Depends(get_gateway)):
    """Generate realistic answer-engine queries for a niche and location.

    Gateway, parse and validation failures raise GraderError, which the app
    renders as ``500 {"error": ...}``.
    """
    if not body.niche or not body.niche.strip():
        return _error(400, "Niche/industry is required")

    prompts = await generate_queries(
        gateway,
        niche=body.niche.strip(),
        location=(body.location or "").strip(),
        count=body.num_prompts or settings.default_num_prompts,
    )
    logger.info("Generated %d prompts for niche=%r", len(prompts), body.niche.strip())
    return {"prompts": prompts}


@router.post(
    "/analyze",
    response_model=VerdictResponse,
    responses={400: {"model": ErrorResponse}},
)
async def analyze(body: AnalyzeRequest, gateway=Depends(get_gateway)):
    """Analyze one query for brand visibility.

    Always answers 200 with a verdict; analysis failures come back as a
    neutral "Analysis failed" verdict.
    """
    if not body.prompt or not body.prompt.strip() or not body.brand or not body.brand.strip():
        return _error(400, "prompt and brand are required")

    verdict = await analyze_query(
        gateway,
        query=body.prompt,
        brand=body.brand.strip(),
        competitors=[c.strip() for c in body.competitors or [] if c and c.strip()],
    )
    return verdict.to_dict()


@router.post(
    "/grade",
    response_model=GradeResponse,
    responses=_ERROR_RESPONSES,
)
async def grade(body: GradeRequest, gateway=Depends(get_gateway)):
    """Run the whole workflow and return queries, verdicts and scores.

    Queries are analyzed sequentially with the configured pacing delay, so
    this call takes roughly ``numPrompts × (two model calls + delay)``.
    """
    config = RunConfig.create(
        brand=body.brand or "",
        niche=body.niche or "",
        competitors=body.competitors,
        location=body.location or "",
        num_prompts=body.num_prompts,
    )
    validation_error = config.validate()
    if validation_error:
        return _error(400, validation_error)

    pipeline = VisibilityPipeline(gateway)
    result = await pipeline.run(config)
    if result.error:
        return _error(500, result.error)

    return result.to_dict()
