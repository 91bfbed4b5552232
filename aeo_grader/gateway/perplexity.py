"""Perplexity answer-engine gateway (OpenAI-compatible chat completions).

Single blocking request/response per call, no retries:
  - missing credential   → ConfigError (raised before any network I/O)
  - no HTTP response     → TransportError(status_code=0)
  - non-2xx status       → TransportError(status_code, body)
  - unexpected 2xx shape → MalformedResponseError
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable

import httpx

from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import ConfigError, MalformedResponseError, TransportError
from aeo_grader.gateway.types import ChatMessage, GatewayRequest, GatewayResponse

logger = logging.getLogger(__name__)

# Pricing per 1M tokens
_PERPLEXITY_PRICING = {
    "sonar": {"input": 1.00, "output": 1.00},
    "sonar-pro": {"input": 3.00, "output": 15.00},
    "sonar-reasoning": {"input": 1.00, "output": 5.00},
    "sonar-reasoning-pro": {"input": 2.00, "output": 8.00},
}

# Bytes of an error body kept in TransportError messages
_ERROR_BODY_LIMIT = 500


class PerplexityGateway:
    """Send chat requests to Perplexity and return the first completion's text."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        default_model: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = api_key
        self.api_url = api_url or settings.perplexity_api_url
        self.default_model = default_model or settings.perplexity_model
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def get_api_key(self) -> str:
        """Resolve the credential: explicit key first, then settings."""
        key = self._api_key or settings.perplexity_api_key
        if not key:
            raise ConfigError(
                "PERPLEXITY_API_KEY is not configured. Add it to your .env file or the deployment environment."
            )
        return key

    async def complete(
        self,
        messages: Iterable[ChatMessage | dict[str, Any]],
        temperature: float = 0.1,
        model: str | None = None,
    ) -> str:
        """Return the raw text of the first completion choice."""
        request = GatewayRequest(
            messages=[ChatMessage.coerce(m) for m in messages],
            temperature=temperature,
            model=model or "",
        )
        response = await self.send(request)
        return response.text

    async def send(self, request: GatewayRequest) -> GatewayResponse:
        api_key = self.get_api_key()
        payload = request.to_payload(self.default_model)
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            raise TransportError(f"Perplexity timeout after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise TransportError(f"Perplexity request failed: {e}") from e

        latency_ms = int((time.monotonic() - start) * 1000)

        if not resp.is_success:
            body = resp.text[:_ERROR_BODY_LIMIT]
            logger.warning("Perplexity returned HTTP %d after %dms", resp.status_code, latency_ms)
            raise TransportError(
                f"Perplexity API error ({resp.status_code}): {body}",
                status_code=resp.status_code,
                body=body,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Perplexity response body is not JSON") from e

        response = self._parse_completion(data, payload["model"])
        response.latency_ms = latency_ms

        logger.debug(
            "Perplexity call: model=%s, tokens=%d, cost=$%.6f, latency=%dms",
            response.model_version,
            response.total_tokens,
            response.cost_usd,
            latency_ms,
        )
        return response

    def _parse_completion(self, data: Any, model: str) -> GatewayResponse:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected Perplexity response shape: missing {e}") from e
        if not isinstance(content, str):
            raise MalformedResponseError("Unexpected Perplexity response shape: content is not a string")

        usage = data.get("usage") or {}
        input_tokens = int(usage.get("prompt_tokens", 0) or 0)
        output_tokens = int(usage.get("completion_tokens", 0) or 0)

        citations = data.get("citations") or []

        return GatewayResponse(
            text=content,
            model_version=data.get("model", model),
            cited_urls=[str(c) for c in citations] if isinstance(citations, list) else [],
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            cost_usd=self._calc_cost(model, input_tokens, output_tokens),
        )

    @staticmethod
    def _calc_cost(model: str, input_tokens: int, output_tokens: int) -> float:
        pricing = _PERPLEXITY_PRICING.get(model, _PERPLEXITY_PRICING["sonar"])
        return round((input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000, 6)
