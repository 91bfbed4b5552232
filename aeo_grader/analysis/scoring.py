"""Score Aggregator — reduces per-query verdicts into a composite score.

  overall     = round(100 × mentioned / total)
  recognition = round(20  × mentioned / total)
  market      = round(10  × mentioned / total)
  quality     = round(20  × (mentioned + cited) / (2 × total))
  sentiment   = round(40  × positive / total)

Rounding is half-up on the float ratio. The sub-scores add up to at most
90 and are independent of ``overall``.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from aeo_grader.analysis.types import Score, Sentiment, Verdict

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``).
    """
    return int(math.floor(value + 0.5))


def aggregate_scores(verdicts: Sequence[Verdict]) -> Score:
    """Compute the composite score. An empty sequence yields all zeros."""
    total = len(verdicts)
    if total == 0:
        return Score()

    mentioned = sum(1 for v in verdicts if v.brand_mentioned)
    cited = sum(1 for v in verdicts if v.brand_cited)
    positive = sum(1 for v in verdicts if v.sentiment == Sentiment.POSITIVE)

    score = Score(
        overall=round_half_up(100 * mentioned / total),
        recognition=round_half_up(20 * mentioned / total),
        market=round_half_up(10 * mentioned / total),
        quality=round_half_up(20 * (mentioned + cited) / (2 * total)),
        sentiment=round_half_up(40 * positive / total),
        total_queries=total,
        mentioned_count=mentioned,
        cited_count=cited,
        positive_count=positive,
    )

    logger.debug(
        "Scoring: total=%d, mentioned=%d, cited=%d, positive=%d → overall=%d",
        total,
        mentioned,
        cited,
        positive,
        score.overall,
    )
    return score
