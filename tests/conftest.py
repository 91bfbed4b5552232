import pytest
from httpx import ASGITransport, AsyncClient

from aeo_grader.core.config import settings

# Override settings for tests
settings.perplexity_api_key = "pplx-test-fake-key"
settings.analysis_delay_seconds = 0.0
settings.generation_delay_seconds = 0.0
settings.analysis_concurrency = 1

from aeo_grader.core.dependencies import get_gateway  # noqa: E402
from aeo_grader.main import app  # noqa: E402


class FakeGateway:
    """Scripted stand-in for PerplexityGateway.

    Each ``complete`` call pops the next scripted item: a string is returned
    as the model's text, an exception instance is raised.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls: list[dict] = []

    async def complete(self, messages, temperature=0.1, model=None):
        self.calls.append({"messages": list(messages), "temperature": temperature, "model": model})
        if not self.responses:
            raise AssertionError("FakeGateway ran out of scripted responses")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def make_gateway():
    """Factory: ``make_gateway(["text", Exception(...), ...])``."""
    return FakeGateway


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
async def client(fake_gateway):
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
