"""Brave Search tool for research queries.

Brave Search (https://brave.com/search/api/) has its own independent index —
it doesn't just proxy Google.
  - Returns titles, descriptions, URLs
  - Optional language, country and location targeting

Search is best-effort enrichment: every failure (no key, transport error,
error status, unexpected body) is logged and yields an empty list. It
never raises to the caller.
"""

from typing import Optional, TypedDict

import httpx

from deep_research.config import BRAVE_API_KEY
from deep_research.utils.logging import log, get_logger

MODULE = "tools"
logger = get_logger()

BRAVE_URL = "https://api.search.brave.com/res/v1/web/search"
SEARCH_TIMEOUT = 15


class SearchResult(TypedDict):
    url: str
    title: str
    description: str


def is_available() -> bool:
    """Check if the Brave API key is configured."""
    return bool(BRAVE_API_KEY)


def _parse_results(data: dict, max_results: int) -> list[SearchResult]:
    results: list[SearchResult] = []
    for item in data.get("web", {}).get("results", [])[:max_results]:
        results.append({
            "url": item.get("url", ""),
            "title": item.get("title", ""),
            "description": item.get("description", ""),
        })
    return results


async def search_brave(
    query: str,
    *,
    lang: Optional[str] = None,
    country: Optional[str] = None,
    location: Optional[str] = None,
    max_results: int = 20,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> list[SearchResult]:
    """Search the web via Brave Search API.

    Args:
        query: Search query string.
        lang: Search language (e.g. "en").
        country: Two-letter country code to bias results toward.
        location: City to localize results for.
        max_results: Maximum results to return.
        client: HTTP client to reuse; a short-lived one is created if None.
        api_key: Overrides BRAVE_API_KEY.

    Returns a list of {url, title, description} dicts.
    """
    api_key = api_key or BRAVE_API_KEY
    if not api_key:
        log.debug(logger, MODULE, "brave_skipped", "Brave search skipped, no API key",
                  query=query[:80])
        return []

    params = {"q": query, "count": max_results, "text_decorations": False}
    if lang:
        params["search_lang"] = lang
    if country:
        params["country"] = country

    headers = {
        "Accept": "application/json",
        "Accept-Encoding": "gzip",
        "X-Subscription-Token": api_key,
    }
    if location:
        headers["X-Loc-City"] = location

    log.debug(logger, MODULE, "brave_start", "Brave search starting",
              query=query[:80], max_results=max_results, lang=lang, country=country)

    owns_client = client is None
    client = client or httpx.AsyncClient()
    try:
        resp = await client.get(
            BRAVE_URL, params=params, headers=headers, timeout=SEARCH_TIMEOUT,
        )
        resp.raise_for_status()
        results = _parse_results(resp.json(), max_results)

        log.debug(logger, MODULE, "brave_done", "Brave search complete",
                  query=query[:50], result_count=len(results))
        return results

    except Exception as e:
        log.warning(logger, MODULE, "brave_failed", "Brave search failed",
                    error=str(e), error_type=type(e).__name__,
                    query=query[:80])
        return []
    finally:
        if owns_client:
            await client.aclose()
