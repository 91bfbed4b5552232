"""Response Analyzer — answer a query, then classify the answer for the brand.

Two gateway calls per query, both at low temperature:
  1. The raw query as the only user message → answer text
  2. A classification prompt embedding the (truncated) answer, the target
     brand and competitors → JSON verdict

The classifier's output is untrusted: every field is defaulted or coerced.
Any failure in either call or in decoding yields a neutral "Analysis failed"
verdict instead of an exception, so one bad query never aborts a run.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from aeo_grader.analysis.types import NO_SUMMARY, Sentiment, Verdict
from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import ValidationError
from aeo_grader.gateway.normalizer import parse_model_json
from aeo_grader.gateway.types import ChatMessage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Classification prompt template
# ---------------------------------------------------------------------------

_ANALYSIS_TEMPLATE = """\
Analyze this AI response text:
---
{answer}
---

Target Brand: {brand}
Competitors: {competitors}

Return a JSON object with these exact keys:
{{
  "brand_mentioned": true,
  "brand_cited": false,
  "competitors_mentioned": ["Competitor A", "Competitor B"],
  "sentiment": "positive",
  "summary": "Short summary of the answer."
}}

If the Target Brand is not found, set "brand_mentioned" to false.
"brand_cited" means there is a citation [1] or link attached specifically to the brand name.
Sentiment options: {sentiments}.
Output ONLY valid JSON."""

_FALSY_STRINGS = {"", "false", "no", "0", "none", "null"}


def build_analysis_prompt(
    answer: str,
    brand: str,
    competitors: Sequence[str] | None = None,
    max_chars: int | None = None,
) -> str:
    """Build the classification prompt.

    The answer is cut at ``max_chars`` characters (hard cutoff) to bound
    prompt size and cost.
    """
    limit = settings.answer_max_chars if max_chars is None else max_chars
    return _ANALYSIS_TEMPLATE.format(
        answer=answer[:limit],
        brand=brand,
        competitors=", ".join(competitors or []),
        sentiments=", ".join(f'"{s.value}"' for s in Sentiment),
    )


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


def _coerce_sentiment(value: Any) -> Sentiment:
    if isinstance(value, str):
        try:
            return Sentiment(value.strip().lower())
        except ValueError:
            logger.debug("Unknown sentiment %r, using neutral", value)
    return Sentiment.NEUTRAL


def _coerce_competitors(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(c).strip() for c in value if c is not None and str(c).strip()]


def _coerce_summary(value: Any) -> str:
    if value is None:
        return NO_SUMMARY
    text = value.strip() if isinstance(value, str) else str(value)
    return text or NO_SUMMARY


def parse_verdict(raw: str, prompt: str) -> Verdict:
    """Decode the classifier output into a Verdict.

    Raises:
        ParseError: output is not valid JSON after fence stripping.
        ValidationError: output is JSON but not an object.
    """
    data = parse_model_json(raw)
    if not isinstance(data, dict):
        raise ValidationError(f"Analysis response was not a JSON object (got {type(data).__name__})")

    return Verdict(
        prompt=prompt,
        summary=_coerce_summary(data.get("summary")),
        brand_mentioned=_coerce_bool(data.get("brand_mentioned", False)),
        brand_cited=_coerce_bool(data.get("brand_cited", False)),
        competitors_mentioned=_coerce_competitors(data.get("competitors_mentioned")),
        sentiment=_coerce_sentiment(data.get("sentiment")),
    )


# ---------------------------------------------------------------------------
# Two-phase analysis
# ---------------------------------------------------------------------------


async def analyze_query(
    gateway,
    query: str,
    brand: str,
    competitors: Sequence[str] | None = None,
) -> Verdict:
    """Answer ``query`` via the answer engine and classify the answer.

    Never raises: failures produce ``Verdict.failed`` with the error message
    in ``summary``.
    """
    temperature = settings.analysis_temperature
    try:
        answer = await gateway.complete(
            [ChatMessage(role="user", content=query)],
            temperature=temperature,
        )

        analysis_prompt = build_analysis_prompt(answer, brand, competitors)
        raw = await gateway.complete(
            [ChatMessage(role="user", content=analysis_prompt)],
            temperature=temperature,
        )

        verdict = parse_verdict(raw, prompt=query)

    except Exception as e:
        logger.warning("Analysis failed for query %r: %s: %s", query[:80], type(e).__name__, e)
        return Verdict.failed(query, str(e) or type(e).__name__)

    logger.info(
        "Analysis complete: brand=%s, mentioned=%s, cited=%s, sentiment=%s, competitors=%d",
        brand,
        verdict.brand_mentioned,
        verdict.brand_cited,
        verdict.sentiment.value,
        len(verdict.competitors_mentioned),
    )
    return verdict
