"""Web search used as the research capability for providers without one."""

from __future__ import annotations

import logging

import httpx

from geetgatha.services.llm.base import SearchSource

log = logging.getLogger(__name__)

DUCKDUCKGO_URL = "https://api.duckduckgo.com/"


async def web_search(query: str, max_results: int = 5) -> tuple[str, list[SearchSource]]:
    """Search the web for information about a query.

    Args:
        query: The search query string
        max_results: Maximum number of related topics to return

    Returns:
        (digest text, sources) where the digest is a numbered list of snippets.

    Raises:
        httpx.HTTPError: When the search endpoint cannot be reached.
    """
    async with httpx.AsyncClient() as client:
        params = {
            "q": query,
            "format": "json",
            "no_html": 1,
        }
        response = await client.get(DUCKDUCKGO_URL, params=params, timeout=10.0)
        response.raise_for_status()
        data = response.json()

    lines: list[str] = []
    sources: list[SearchSource] = []

    if data.get("Abstract"):
        lines.append(f"Summary: {data['Abstract']}")
        if data.get("AbstractURL"):
            sources.append(SearchSource(title=data.get("Heading") or query, uri=data["AbstractURL"]))

    topics = 0
    for topic in data.get("RelatedTopics") or []:
        if topics >= max_results:
            break
        if not isinstance(topic, dict):
            continue
        snippet = topic.get("Text", "")
        url = topic.get("FirstURL", "")
        if snippet:
            topics += 1
            lines.append(f"{topics}. {snippet[:200]}")
            sources.append(SearchSource(title=snippet[:80], uri=url))

    log.info(f"Web search results for '{query}': {len(sources)} results")
    return "\n".join(lines), sources
