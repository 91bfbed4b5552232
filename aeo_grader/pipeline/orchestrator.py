"""VisibilityPipeline — orchestrator for the generate → analyze → score workflow.

Usage:
    from aeo_grader.pipeline import RunConfig, VisibilityPipeline

    config = RunConfig.create(brand="Acme", niche="Widgets", competitors="Globex, Initech")
    pipeline = VisibilityPipeline()
    result = await pipeline.run(config)
    # result.score.overall → 0..100

Queries are analyzed one at a time with a pacing delay between calls. With
``concurrency > 1`` a bounded fan-out is used instead; verdicts are still
returned in query order. Cancellation is cooperative: the token is checked
before each query, and an in-flight call is always allowed to finish.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from functools import partial
from typing import Awaitable, Callable, Sequence

from aeo_grader.analysis.analyzer import analyze_query
from aeo_grader.analysis.scoring import aggregate_scores
from aeo_grader.analysis.types import Verdict
from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import GraderError
from aeo_grader.pipeline import state as transitions
from aeo_grader.pipeline.types import (
    CancellationToken,
    PipelineResult,
    PipelineStage,
    PipelineState,
    RunConfig,
)
from aeo_grader.prompt_engine.generator import generate_queries

logger = logging.getLogger(__name__)

QueryGenerator = Callable[[str, str, int], Awaitable[list[str]]]
ResponseAnalyzer = Callable[[str, str, Sequence[str]], Awaitable[Verdict]]
ProgressCallback = Callable[[PipelineState], None]


class VisibilityPipeline:
    """Drives one grading run at a time and owns its PipelineState."""

    def __init__(
        self,
        gateway=None,
        *,
        query_generator: QueryGenerator | None = None,
        response_analyzer: ResponseAnalyzer | None = None,
        analysis_delay: float | None = None,
        generation_delay: float | None = None,
        concurrency: int | None = None,
    ):
        """
        Args:
            gateway: Answer-engine gateway; a PerplexityGateway is created if
                omitted and a default collaborator needs one.
            query_generator: Override for ``generate_queries(niche, location, count)``.
            response_analyzer: Override for ``analyze_query(query, brand, competitors)``.
            analysis_delay: Seconds to pause between per-query analyses.
            generation_delay: Seconds to pause after queries are generated.
            concurrency: Max queries analyzed at once (1 = sequential).
        """
        if gateway is None and (query_generator is None or response_analyzer is None):
            from aeo_grader.gateway.perplexity import PerplexityGateway

            gateway = PerplexityGateway()

        self._generate = query_generator or partial(generate_queries, gateway)
        self._analyze = response_analyzer or partial(analyze_query, gateway)
        self.analysis_delay = settings.analysis_delay_seconds if analysis_delay is None else analysis_delay
        self.generation_delay = settings.generation_delay_seconds if generation_delay is None else generation_delay
        self.concurrency = max(1, concurrency if concurrency is not None else settings.analysis_concurrency)

        self._state = PipelineState.initial()
        self._token = CancellationToken()
        self._on_progress: ProgressCallback | None = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    def cancel(self) -> None:
        """Stop the current run before its next query."""
        self._token.cancel()

    def reset(self) -> None:
        """Discard verdicts, score and progress; a fresh token is used for the next run."""
        self._token.cancel()
        self._token = CancellationToken()
        self._state = transitions.reset(self._state)
        self._notify()

    def _apply(self, token: CancellationToken, transition, *args) -> None:
        # A reset() during the run swaps the token; late updates from that run are dropped
        if token is not self._token:
            return
        self._state = transition(self._state, *args)
        self._notify()

    def _notify(self) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(self._state)
        except Exception:
            logger.exception("Progress callback raised")

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(
        self,
        config: RunConfig,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Execute generate → analyze × N → score for one config."""
        # Each run owns its token; a run still in flight is superseded and stops updating state
        token = cancel_token if cancel_token is not None else CancellationToken()
        if self._token is not token:
            self._token.cancel()
        self._token = token
        self._on_progress = on_progress

        if self._state.stage != PipelineStage.IDLE:
            self._apply(token, transitions.reset)

        error = config.validate()
        if error:
            logger.info("Rejected run config: %s", error)
            self._apply(token, transitions.reject_config, error)
            return PipelineResult(error=error)

        self._apply(token, transitions.start_generation)

        try:
            queries = await self._generate(config.niche, config.location, config.num_prompts)
        except GraderError as e:
            return self._fail_generation(token, e.message)
        except Exception as e:
            logger.exception("Query generation crashed")
            return self._fail_generation(token, str(e) or type(e).__name__)

        if not queries:
            return self._fail_generation(token, "No prompts generated")

        self._apply(token, transitions.queries_generated, list(queries))
        logger.info(
            "Analyzing %d queries for brand=%r",
            len(queries),
            config.brand,
            extra={"brand": config.brand, "stage": PipelineStage.ANALYZING_QUERIES.value},
        )

        if self.generation_delay > 0 and not token.cancelled:
            await asyncio.sleep(self.generation_delay)

        if self.concurrency > 1:
            verdicts = await self._analyze_parallel(config, queries, token)
        else:
            verdicts = await self._analyze_sequential(config, queries, token)

        score = aggregate_scores(verdicts)
        was_cancelled = len(verdicts) < len(queries)

        if was_cancelled:
            logger.info("Run cancelled after %d of %d queries", len(verdicts), len(queries))
            self._apply(token, transitions.cancelled)
        else:
            self._apply(token, transitions.analysis_complete, score)
            logger.info(
                "Run complete: brand=%r, overall=%d, mentioned=%d/%d, cited=%d",
                config.brand,
                score.overall,
                score.mentioned_count,
                score.total_queries,
                score.cited_count,
            )

        return PipelineResult(
            queries=list(queries),
            verdicts=verdicts,
            score=score,
            cancelled=was_cancelled,
        )

    def _fail_generation(self, token: CancellationToken, message: str) -> PipelineResult:
        logger.error("Query generation failed: %s", message)
        self._apply(token, transitions.generation_failed, message)
        return PipelineResult(error=message)

    async def _analyze_one(self, config: RunConfig, query: str) -> Verdict:
        try:
            verdict = await self._analyze(query, config.brand, list(config.competitors))
        except Exception as e:
            logger.warning("Analyzer raised for query %r: %s", query[:80], e)
            return Verdict.failed(query, str(e) or type(e).__name__)
        if verdict.prompt != query:
            verdict = replace(verdict, prompt=query)
        return verdict

    async def _analyze_sequential(
        self,
        config: RunConfig,
        queries: Sequence[str],
        token: CancellationToken,
    ) -> list[Verdict]:
        verdicts: list[Verdict] = []
        for i, query in enumerate(queries):
            if token.cancelled:
                break
            self._apply(token, transitions.query_started, i)
            logger.debug("Analyzing query %r", query[:80], extra={"brand": config.brand, "query_index": i})

            verdict = await self._analyze_one(config, query)
            verdicts.append(verdict)
            self._apply(token, transitions.verdict_received, verdict)

            if i < len(queries) - 1 and self.analysis_delay > 0:
                await asyncio.sleep(self.analysis_delay)
        return verdicts

    async def _analyze_parallel(
        self,
        config: RunConfig,
        queries: Sequence[str],
        token: CancellationToken,
    ) -> list[Verdict]:
        semaphore = asyncio.Semaphore(self.concurrency)
        slots: list[Verdict | None] = [None] * len(queries)

        async def _worker(index: int, query: str) -> None:
            async with semaphore:
                if token.cancelled:
                    return
                self._apply(token, transitions.query_started, index)
                logger.debug("Analyzing query %r", query[:80], extra={"brand": config.brand, "query_index": index})
                slots[index] = await self._analyze_one(config, query)
                if self.analysis_delay > 0:
                    await asyncio.sleep(self.analysis_delay)

        await asyncio.gather(*(_worker(i, q) for i, q in enumerate(queries)))

        # Assemble in query order, not arrival order
        verdicts = [v for v in slots if v is not None]
        for verdict in verdicts:
            self._apply(token, transitions.verdict_received, verdict)
        return verdicts
