"""Context aggregation for the generation prompt.

Renders ranked search results into one text blob using a per-flow item
template. Order is preserved, nothing is de-duplicated or truncated here.
"""

from typing import Iterable

from models.search import SearchResult

DEFAULT_ITEM_TEMPLATE = "[Title] {title}\n[Content] {content}"
DEFAULT_SEPARATOR = "\n---\n"
UNKNOWN_DATE = "Unknown Date"


def render_item(result: SearchResult, template: str = DEFAULT_ITEM_TEMPLATE) -> str:
    """Render one result with the item template.

    Available placeholders: {title}, {content}, {published_date}, {url}.
    """
    return template.format(
        title=result.title,
        content=result.content,
        published_date=result.published_date or UNKNOWN_DATE,
        url=result.url,
    )


def aggregate(
    results: Iterable[SearchResult],
    template: str = DEFAULT_ITEM_TEMPLATE,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Concatenate ranked results into the model context.

    Args:
        results: Search results in provider relevance order
        template: Per-item format string
        separator: Text placed between items

    Returns:
        Context text (empty string for no results)
    """
    return separator.join(render_item(r, template) for r in results)
