import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from eansearch.app import app
from eansearch.client import EANSearch
from eansearch.dependencies import get_client


class FakeUpstream:
    """Stand-in for api.ean-search.org: serves queued responses, records requests."""

    def __init__(self) -> None:
        self.responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []

    def queue(self, status_code: int = 200, *, json=None, text: str | None = None, headers=None) -> None:
        if text is not None:
            self.responses.append(httpx.Response(status_code, text=text, headers=headers))
        else:
            self.responses.append(httpx.Response(status_code, json=json, headers=headers))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, text="no response queued")
        return self.responses.pop(0)

    @property
    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def eans(upstream: FakeUpstream):
    with EANSearch("secret-token", transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
async def client(eans: EANSearch):
    app.dependency_overrides[get_client] = lambda: eans
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
