"""Web search adapter backed by the Tavily REST API.

The search collaborator returns ranked results for a query. Ordering is the
provider's relevance order and is preserved all the way into the model
context.

Error Handling:
    - Invalid key or quota exceeded: Raises SearchError (hard)
    - Any other non-200 status: Raises SearchError (hard)
    - Transport failure: Raises SearchError wrapping the aiohttp error
    - No results: Returns empty SearchResults (soft - query may be bad)
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Literal

import aiohttp

from models.search import SearchResult
from tools.utils import post_json

logger = logging.getLogger(__name__)

TAVILY_SEARCH_URL = "https://api.tavily.com/search"

SearchDepth = Literal["basic", "advanced"]


class SearchError(Exception):
    """Raised when the search API fails with a non-recoverable error.

    Examples:
    - Invalid API key
    - Quota exceeded
    - API returned error status
    """
    pass


@dataclass
class SearchResults:
    """Results from a web search query.

    Attributes:
        query: The original search query
        results: Ranked results in provider order
    """

    query: str
    results: list[SearchResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)


def parse_results(data: dict) -> list[SearchResult]:
    """Convert a Tavily response body into SearchResult models."""
    results = []
    for item in data.get("results") or []:
        results.append(SearchResult(
            title=item.get("title") or "",
            content=item.get("content") or "",
            published_date=item.get("published_date") or None,
            url=item.get("url") or "",
        ))
    return results


class SearchClient:
    """Tavily search client.

    Example:
        >>> client = SearchClient(api_key, timeout=30)
        >>> found = await client.search("latest AI papers", depth="advanced", max_results=7)
        >>> len(found)
        7
    """

    def __init__(self, api_key: str, timeout: float = 30.0, url: str = TAVILY_SEARCH_URL):
        self.api_key = api_key
        self.timeout = timeout
        self.url = url

    async def search(
        self,
        query: str,
        depth: SearchDepth = "basic",
        max_results: int = 5,
    ) -> SearchResults:
        """Search the web for a query.

        Args:
            query: Search query string
            depth: 'basic' (1 credit) or 'advanced' (2 credits)
            max_results: Maximum number of results to return

        Returns:
            SearchResults in provider relevance order

        Raises:
            SearchError: If the API fails (hard error, don't retry)
        """
        payload = {
            "api_key": self.api_key,
            "query": query,
            "search_depth": depth,
            "max_results": max_results,
        }

        logger.debug("Web search (Tavily): %s", query[:50])
        try:
            status, body = await post_json(self.url, payload, timeout=self.timeout)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SearchError(f"Tavily request failed: {type(e).__name__}: {e}") from e

        if status in (401, 403):
            raise SearchError("Tavily API key invalid or quota exceeded")
        if status == 429:
            raise SearchError("Tavily rate limit exceeded")
        if status != 200:
            raise SearchError(f"Tavily API error: HTTP {status}")

        try:
            data = json.loads(body)
        except ValueError as e:
            raise SearchError(f"Tavily returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SearchError("Tavily returned an unexpected response shape")
        if "error" in data:
            raise SearchError(f"Tavily error: {data['error']}")

        results = parse_results(data)
        logger.debug("Web search complete | query=%s results=%d", query[:50], len(results))
        return SearchResults(query=query, results=results)
