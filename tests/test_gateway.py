"""Tests for the Perplexity answer-engine gateway (mocked HTTP)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from aeo_grader.core.config import settings
from aeo_grader.core.exceptions import ConfigError, MalformedResponseError, TransportError
from aeo_grader.gateway.perplexity import PerplexityGateway
from aeo_grader.gateway.types import ChatMessage, GatewayRequest


def _mock_response(status_code: int = 200, data=None, text: str = "", json_error: bool = False):
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.text = text
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = data
    return resp


def _patched_client(resp=None, side_effect=None):
    patcher = patch("aeo_grader.gateway.perplexity.httpx.AsyncClient")
    MockClient = patcher.start()
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    MockClient.return_value = mock_client
    return patcher, MockClient, mock_client


@pytest.fixture
def gateway():
    return PerplexityGateway(api_key="pplx-test-fake-key", default_model="sonar-pro", timeout=5)


class TestGatewayTypes:
    def test_chat_message_coerce_dict(self):
        msg = ChatMessage.coerce({"role": "system", "content": "hi"})
        assert msg == ChatMessage(role="system", content="hi")

    def test_chat_message_coerce_passthrough(self):
        msg = ChatMessage(role="user", content="q")
        assert ChatMessage.coerce(msg) is msg

    def test_request_payload_uses_default_model(self):
        req = GatewayRequest(messages=[ChatMessage(content="q")], temperature=0.7)
        payload = req.to_payload("sonar-pro")
        assert payload == {
            "model": "sonar-pro",
            "messages": [{"role": "user", "content": "q"}],
            "temperature": 0.7,
        }

    def test_request_payload_explicit_model(self):
        req = GatewayRequest(model="sonar")
        assert req.to_payload("sonar-pro")["model"] == "sonar"


class TestComplete:
    @pytest.mark.asyncio
    async def test_success_returns_first_choice_text(self, gateway):
        data = {
            "choices": [
                {"message": {"content": "Acme is a widget maker [1]."}},
                {"message": {"content": "ignored"}},
            ],
            "model": "sonar-pro",
            "citations": ["https://acme.example.com"],
            "usage": {"prompt_tokens": 1000, "completion_tokens": 500},
        }
        patcher, _, mock_client = _patched_client(_mock_response(data=data))
        try:
            text = await gateway.complete([{"role": "user", "content": "Who makes widgets?"}], temperature=0.1)
        finally:
            patcher.stop()

        assert text == "Acme is a widget maker [1]."
        _, kwargs = mock_client.post.call_args
        assert kwargs["json"] == {
            "model": "sonar-pro",
            "messages": [{"role": "user", "content": "Who makes widgets?"}],
            "temperature": 0.1,
        }
        assert kwargs["headers"]["Authorization"] == "Bearer pplx-test-fake-key"

    @pytest.mark.asyncio
    async def test_send_reports_usage_cost_and_citations(self, gateway):
        data = {
            "choices": [{"message": {"content": "answer"}}],
            "model": "sonar-pro",
            "citations": ["https://a.example", "https://b.example"],
            "usage": {"prompt_tokens": 1000, "completion_tokens": 500},
        }
        patcher, _, _ = _patched_client(_mock_response(data=data))
        try:
            response = await gateway.send(GatewayRequest(messages=[ChatMessage(content="q")]))
        finally:
            patcher.stop()

        assert response.total_tokens == 1500
        assert response.cost_usd == round((1000 * 3.00 + 500 * 15.00) / 1_000_000, 6)
        assert response.cited_urls == ["https://a.example", "https://b.example"]
        assert response.model_version == "sonar-pro"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_transport_error(self, gateway):
        patcher, _, _ = _patched_client(_mock_response(status_code=401, text="Invalid API key"))
        try:
            with pytest.raises(TransportError) as exc_info:
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

        err = exc_info.value
        assert err.status_code == 401
        assert err.body == "Invalid API key"
        assert "(401)" in str(err)

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error_without_status(self, gateway):
        patcher, _, _ = _patched_client(side_effect=httpx.ReadTimeout("timed out"))
        try:
            with pytest.raises(TransportError) as exc_info:
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()
        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_connect_error_raises_transport_error(self, gateway):
        patcher, _, _ = _patched_client(side_effect=httpx.ConnectError("connection refused"))
        try:
            with pytest.raises(TransportError):
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_missing_choices_raises_malformed(self, gateway):
        patcher, _, _ = _patched_client(_mock_response(data={"error": "nope"}))
        try:
            with pytest.raises(MalformedResponseError):
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_empty_choices_raises_malformed(self, gateway):
        patcher, _, _ = _patched_client(_mock_response(data={"choices": []}))
        try:
            with pytest.raises(MalformedResponseError):
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_null_content_raises_malformed(self, gateway):
        patcher, _, _ = _patched_client(_mock_response(data={"choices": [{"message": {"content": None}}]}))
        try:
            with pytest.raises(MalformedResponseError):
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_non_json_body_raises_malformed(self, gateway):
        patcher, _, _ = _patched_client(_mock_response(json_error=True, text="<html>"))
        try:
            with pytest.raises(MalformedResponseError):
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()


class TestCredential:
    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, monkeypatch):
        monkeypatch.setattr(settings, "perplexity_api_key", "")
        gateway = PerplexityGateway()

        patcher, MockClient, _ = _patched_client(_mock_response(data={}))
        try:
            with pytest.raises(ConfigError) as exc_info:
                await gateway.complete([ChatMessage(content="q")])
        finally:
            patcher.stop()

        assert "PERPLEXITY_API_KEY" in str(exc_info.value)
        MockClient.assert_not_called()

    def test_key_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "perplexity_api_key", "pplx-from-env")
        assert PerplexityGateway().get_api_key() == "pplx-from-env"

    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "perplexity_api_key", "pplx-from-env")
        assert PerplexityGateway(api_key="pplx-explicit").get_api_key() == "pplx-explicit"


class TestCalcCost:
    def test_unknown_model_priced_as_sonar(self):
        assert PerplexityGateway._calc_cost("mystery", 1_000_000, 0) == 1.0

    def test_zero_tokens(self):
        assert PerplexityGateway._calc_cost("sonar-pro", 0, 0) == 0.0
