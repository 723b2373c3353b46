"""Web search digest tests against a mocked DuckDuckGo endpoint."""

import httpx
import pytest

from geetgatha.services import web_search as web_search_module
from geetgatha.services.web_search import web_search


def _topics(count):
    return [
        {"Text": f"Monsoon song number {n}", "FirstURL": f"https://duckduckgo.com/Song_{n}"}
        for n in range(1, count + 1)
    ]


@pytest.fixture
def serve(monkeypatch):
    """Route the module's HTTP client to a canned JSON payload."""
    real_client = httpx.AsyncClient

    def install(payload):
        def handler(request):
            assert request.url.params["format"] == "json"
            return httpx.Response(200, json=payload)

        monkeypatch.setattr(
            web_search_module.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    return install


@pytest.mark.asyncio
async def test_01_topics_numbered_from_one_after_abstract(serve):
    serve({
        "Heading": "Monsoon",
        "Abstract": "The rainy season of South Asia.",
        "AbstractURL": "https://en.wikipedia.org/wiki/Monsoon",
        "RelatedTopics": [{"Name": "Films", "Topics": []}] + _topics(7),
    })

    digest, sources = await web_search("monsoon songs", max_results=5)

    lines = digest.splitlines()
    assert lines[0] == "Summary: The rainy season of South Asia."
    assert lines[1] == "1. Monsoon song number 1"
    assert lines[-1] == "5. Monsoon song number 5"
    assert len(lines) == 6
    # Abstract source plus max_results topics
    assert len(sources) == 6
    assert sources[0].title == "Monsoon"
    assert sources[-1].uri == "https://duckduckgo.com/Song_5"


@pytest.mark.asyncio
async def test_02_topics_only(serve):
    serve({"Abstract": "", "RelatedTopics": _topics(2)})

    digest, sources = await web_search("rain")

    assert digest == "1. Monsoon song number 1\n2. Monsoon song number 2"
    assert [source.title for source in sources] == ["Monsoon song number 1", "Monsoon song number 2"]


@pytest.mark.asyncio
async def test_03_http_error_propagates(monkeypatch):
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        web_search_module.httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(lambda request: httpx.Response(503)), **kwargs),
    )

    with pytest.raises(httpx.HTTPStatusError):
        await web_search("rain")
