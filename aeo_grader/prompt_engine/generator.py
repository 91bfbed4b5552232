"""Query Generator — synthesizes realistic answer-engine queries for a niche.

One LLM call per run, at a higher temperature so the queries are diverse.
The model is asked for a raw JSON array of strings; anything else is
rejected rather than repaired. Generated queries are returned verbatim
(no dedup, no filtering).
"""

from __future__ import annotations

import logging

from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import ValidationError
from aeo_grader.gateway.normalizer import parse_model_json
from aeo_grader.gateway.types import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "worldwide"

QUERY_CATEGORIES = [
    "Comparisons",
    "best options",
    "safety regulations",
    "buying advice",
    "pricing",
    "brand recommendations",
]

_SYSTEM_PROMPT = "You are a helpful assistant. Output ONLY a valid JSON array of strings."

_USER_TEMPLATE = """\
Generate {count} realistic search queries that potential customers would ask an AI Answer Engine \
about {niche} in {location}.
Focus on: {categories}.
Output format: ["question 1", "question 2", "question 3"]
Do not output markdown code blocks. Just the raw JSON array."""


def build_generation_messages(niche: str, location: str, count: int) -> list[ChatMessage]:
    """Build the system + user messages for query generation."""
    user_prompt = _USER_TEMPLATE.format(
        count=count,
        niche=niche,
        location=location or DEFAULT_LOCATION,
        categories=", ".join(QUERY_CATEGORIES),
    )
    return [
        ChatMessage(role="system", content=_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user_prompt),
    ]


def _validate_queries(parsed: object) -> list[str]:
    if not isinstance(parsed, list):
        raise ValidationError(f"Response was not a JSON array (got {type(parsed).__name__})")
    for i, item in enumerate(parsed):
        if not isinstance(item, str):
            raise ValidationError(f"Query #{i + 1} is not a string (got {type(item).__name__})")
    return parsed


async def generate_queries(gateway, niche: str, location: str = "", count: int | None = None) -> list[str]:
    """Generate ``count`` search queries for a niche/location.

    Args:
        gateway: Anything with an async ``complete(messages, temperature, model)``.
        niche: Industry or product niche, e.g. "Electric bikes".
        location: Geographic focus; empty → "worldwide".
        count: Number of queries to request (default from settings).

    Returns:
        Queries in the order the model produced them.

    Raises:
        ValidationError: invalid count, or output is not an array of strings.
        ParseError: output is not valid JSON after fence stripping.
        ConfigError / TransportError / MalformedResponseError: from the gateway.
    """
    if count is None:
        count = settings.default_num_prompts
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError(f"Query count must be a positive integer, got {count!r}")

    messages = build_generation_messages(niche, location, count)
    raw = await gateway.complete(messages, temperature=settings.generation_temperature)

    queries = _validate_queries(parse_model_json(raw))

    logger.info(
        "Generated %d queries (requested %d) for niche=%r, location=%r",
        len(queries),
        count,
        niche,
        location or DEFAULT_LOCATION,
    )
    return queries
