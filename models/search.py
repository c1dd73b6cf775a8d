"""Search result model for ranked web-search hits.

Results are produced by the search adapter in provider relevance order.
The pipeline never re-sorts or de-duplicates them; the aggregator renders
them into the model context exactly as received.
"""

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """A single ranked web-search hit.

    Attributes:
        title: Page headline
        content: Extracted snippet or body text
        published_date: Publication date as reported by the provider (optional)
        url: Canonical link to the page

    Example:
        >>> result = SearchResult(
        ...     title="New reasoning benchmark released",
        ...     content="Researchers introduced...",
        ...     url="https://arxiv.org/abs/2512.00001",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Page headline")
    content: str = Field(default="", description="Snippet or extracted body text")
    published_date: str | None = Field(default=None, description="Provider publication date")
    url: str = Field(default="", description="Link to the page")

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"SearchResult('{self.title[:50]}')"
