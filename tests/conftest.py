import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from annotator import Annotator
from link_store import LinkStore
from main import create_app
from models import ShortenedLink
from storage import LocalStorage


def gemini_reply(payload) -> dict:
    """generateContent response body whose candidate text is `payload` as JSON."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}],
        "usageMetadata": {"promptTokenCount": 42, "candidatesTokenCount": 17, "totalTokenCount": 59},
    }


def make_link(**overrides) -> ShortenedLink:
    fields = {
        "id": "link-1",
        "original_url": "https://foo.test",
        "short_code": "ab12cd",
        "created_at": 1_700_000_000_000,
        "clicks": 0,
        "tags": ["Dev", "Testing", "Docs"],
        "ai_summary": "A site used for tests",
        "category": "Tech",
    }
    fields.update(overrides)
    return ShortenedLink(**fields)


@pytest.fixture
def storage_path(tmp_path):
    return str(tmp_path / "swiftlink.json")


@pytest.fixture
def storage(storage_path):
    return LocalStorage(storage_path)


@pytest.fixture
def store(storage):
    return LinkStore(storage)


@pytest.fixture
def failing_annotator():
    """Annotator whose every Gemini call fails at the network level."""
    def handler(request):
        raise httpx.ConnectError("network down", request=request)

    return Annotator(api_key="test-key", model="gemini-test", transport=httpx.MockTransport(handler))


@pytest.fixture
def gemini_annotator():
    """Annotator backed by a mock Gemini that always answers successfully."""
    def handler(request):
        return httpx.Response(200, json=gemini_reply({
            "tags": ["Search", "Google", "Web"],
            "summary": "Popular web search engine homepage",
            "category": "Tech",
        }))

    return Annotator(api_key="test-key", model="gemini-test", transport=httpx.MockTransport(handler))


@pytest_asyncio.fixture
async def client(store, failing_annotator):
    app = create_app(store=store, annotator=failing_annotator)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await failing_annotator.close()
