"""
run_grader.py — one AEO grading run from the command line.

Runs the whole pipeline in-process (no HTTP server):
  1. Generate search queries for the niche
  2. Ask the answer engine each query and classify the answer
  3. Print per-query verdicts and the composite score

Ctrl-C stops after the query currently being analyzed; the score is then
computed over the queries finished so far.

Usage:
    PERPLEXITY_API_KEY=pplx-... python run_grader.py --brand Acme --niche "Electric bikes" \
        --competitors "Rad Power, Specialized" --location US --num-prompts 3
"""

import argparse
import asyncio
import signal
import sys

from aeo_grader.core.logging import setup_logging
from aeo_grader.pipeline import PipelineState, RunConfig, VisibilityPipeline


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Grade a brand's visibility in AI answers")
    parser.add_argument("--brand", required=True)
    parser.add_argument("--niche", required=True)
    parser.add_argument("--competitors", default="", help="comma-separated")
    parser.add_argument("--location", default="")
    parser.add_argument("--num-prompts", type=int, default=3)
    return parser.parse_args(argv)


def _print_progress(state: PipelineState) -> None:
    p = state.progress
    if p.label:
        print(f"  [{state.stage.value}] {p.current}/{p.total} {p.label}")


async def main(argv: list[str]) -> int:
    args = _parse_args(argv)
    config = RunConfig.create(
        brand=args.brand,
        niche=args.niche,
        competitors=args.competitors,
        location=args.location,
        num_prompts=args.num_prompts,
    )

    pipeline = VisibilityPipeline()
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, pipeline.cancel)
    except NotImplementedError:
        pass  # Windows: Ctrl-C aborts instead of cancelling cooperatively

    print("\n" + "=" * 60)
    print(f"  Grading {config.brand!r} in {config.niche!r} ({config.location})")
    print("=" * 60)

    result = await pipeline.run(config, on_progress=_print_progress)

    if result.error:
        print(f"\n  ❌ {result.error}")
        return 1

    print("\n" + "=" * 60)
    print("  Results" + (" (cancelled)" if result.cancelled else ""))
    print("=" * 60)
    for v in result.verdicts:
        mark = "✓" if v.brand_mentioned else "✗"
        cited = " [cited]" if v.brand_cited else ""
        print(f"  {mark} {v.prompt}{cited}")
        print(f"      sentiment={v.sentiment.value}  competitors={', '.join(v.competitors_mentioned) or '-'}")
        print(f"      {v.summary}")

    s = result.score
    print("\n" + "=" * 60)
    print(f"  AI Visibility Score: {s.overall}/100")
    print("=" * 60)
    print(f"  Recognition: {s.recognition}/20   Market: {s.market}/10")
    print(f"  Quality:     {s.quality}/20   Sentiment: {s.sentiment}/40")
    print(f"  Mentioned {s.mentioned_count}/{s.total_queries}, cited {s.cited_count}, positive {s.positive_count}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main(sys.argv[1:])))
