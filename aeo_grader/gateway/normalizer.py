"""Output Normalizer — strips markdown code fences from model output.

Models often wrap structured output in triple-backtick fences, optionally
tagged ``json``. Only the first fenced block is considered; nested or
nonstandard fences are not handled.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from aeo_grader.core.exceptions import ParseError

logger = logging.getLogger(__name__)

_FENCE = "```"
_JSON_FENCE = "```json"

# Characters of offending text quoted in ParseError messages
_EXCERPT_LIMIT = 120


def _between_first_fence(text: str, opener: str) -> str:
    after_open = text.split(opener, 1)[1]
    return after_open.split(_FENCE, 1)[0].strip()


def normalize_output(raw: str) -> str:
    """Return the content of the first fenced block, or the trimmed input.

    Idempotent: normalize_output(normalize_output(x)) == normalize_output(x).
    """
    content = (raw or "").strip()
    if _JSON_FENCE in content:
        return _between_first_fence(content, _JSON_FENCE)
    if _FENCE in content:
        return _between_first_fence(content, _FENCE)
    return content


def parse_model_json(raw: str) -> Any:
    """Normalize model output and decode it as JSON.

    Raises:
        ParseError: the normalized text is not valid JSON.
    """
    cleaned = normalize_output(raw)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        excerpt = cleaned[:_EXCERPT_LIMIT]
        logger.debug("Model output is not JSON: %r", excerpt)
        raise ParseError(f"Model output is not valid JSON ({e.msg}): {excerpt!r}") from e
