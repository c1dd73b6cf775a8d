"""Tools for the Scout pipeline.

SearchClient:
    Tavily web search returning ranked SearchResults.

aggregate:
    Render ranked results into the model context.

post_json / create_session:
    Shared aiohttp helpers with certifi SSL and a total timeout.

Example:
    >>> from tools import SearchClient, aggregate
    >>> found = await SearchClient(api_key).search("AI papers", depth="advanced", max_results=7)
    >>> context = aggregate(found.results)
"""

from tools.utils import create_session, create_ssl_context, post_json, USER_AGENT
from tools.search import SearchClient, SearchError, SearchResults
from tools.context import aggregate

__all__ = [
    "SearchClient",
    "SearchError",
    "SearchResults",
    "aggregate",
    "post_json",
    "create_session",
    "create_ssl_context",
    "USER_AGENT",
]
