import pytest

from flowintent.agents.tools.seo_tools import BacklinksClient
from flowintent.agents.tools.tool_assembler import build_default_registry
from flowintent.services.rate_limiter import MinIntervalRateLimiter

from tests.fakes import FakeResponse, FakeSession


@pytest.fixture
def fake_session():
    return FakeSession([FakeResponse(200, [])])


@pytest.fixture
def backlinks_client(fake_session):
    return BacklinksClient(
        webhook_url="https://hooks.test/webhook/domain",
        timeout=5,
        session=fake_session,
        rate_limiter=MinIntervalRateLimiter(0),
        sleep=lambda seconds: None
    )


@pytest.fixture
def tool_registry(backlinks_client):
    return build_default_registry(backlinks_client)
