"""Structured-record persistence sink (Notion database pages).

Each run creates one page under the configured database. The page carries
typed properties rendered from the report and an ordered list of content
blocks.

Properties:
    Name (title), Date (date), Status (select), Summary, Value,
    App Inspiration (rich text), url (url or null)

Notion rejects rich text longer than 2000 characters, so every free-text
value is cut to its first MAX_TEXT_LENGTH characters before the payload
is built. Notion counts UTF-16 code units, so characters outside the BMP
(most emoji) count twice.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import aiohttp

from models.report import Report
from rendering import Block, BlockKind, RecordMapping, ReportRenderer
from sinks import SinkError
from tools.utils import post_json

logger = logging.getLogger(__name__)

NOTION_PAGES_URL = "https://api.notion.com/v1/pages"
MAX_TEXT_LENGTH = 2000


def truncate(text: str | None, limit: int = MAX_TEXT_LENGTH) -> str:
    """Cut text to at most limit UTF-16 code units.

    A surrogate pair is never split; for BMP-only text this is text[:limit].
    """
    text = text or ""
    units = 0
    for i, ch in enumerate(text):
        units += 2 if ord(ch) > 0xFFFF else 1
        if units > limit:
            return text[:i]
    return text


def _rich_text(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": truncate(text)}}]


def _block_json(block: Block) -> dict[str, Any]:
    """Convert a neutral block into a Notion block object."""
    if block.kind is BlockKind.DIVIDER:
        return {"object": "block", "type": "divider", "divider": {}}
    if block.kind is BlockKind.HEADING:
        return {
            "object": "block",
            "type": "heading_2",
            "heading_2": {"rich_text": _rich_text(block.text)},
        }
    if block.kind is BlockKind.CALLOUT:
        callout: dict[str, Any] = {"rich_text": _rich_text(block.text)}
        if block.icon:
            callout["icon"] = {"type": "emoji", "emoji": block.icon}
        return {"object": "block", "type": "callout", "callout": callout}
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": _rich_text(block.text)},
    }


@dataclass(frozen=True)
class PersistencePayload:
    """Record properties and content blocks for one page."""

    database_id: str
    properties: dict[str, Any]
    children: list[dict[str, Any]]

    def to_json(self) -> dict[str, Any]:
        return {
            "parent": {"database_id": self.database_id},
            "properties": self.properties,
            "children": self.children,
        }


class PersistenceSink:
    """Creates one Notion page per run.

    Example:
        >>> sink = PersistenceSink(api_key, database_id, renderer=renderer, mapping=mapping)
        >>> await sink.send(sink.render(report))
    """

    name = "persistence"

    def __init__(
        self,
        api_key: str,
        database_id: str,
        renderer: ReportRenderer,
        mapping: RecordMapping,
        status: str = "New",
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
        today: date | None = None,
        url: str = NOTION_PAGES_URL,
    ):
        self.api_key = api_key
        self.database_id = database_id
        self.renderer = renderer
        self.mapping = mapping
        self.status = status
        self.notion_version = notion_version
        self.timeout = timeout
        self.today = today
        self.url = url

    def render(self, report: Report) -> PersistencePayload:
        """Build page properties and blocks, truncating all free text."""
        fields = self.renderer.record_fields(report, self.mapping)
        today = self.today or date.today()
        safe_url = fields.url if fields.url.startswith("http") else None

        properties = {
            "Name": {"title": [{"text": {"content": truncate(fields.title)}}]},
            "Date": {"date": {"start": today.isoformat()}},
            "Status": {"select": {"name": self.status}},
            "Summary": {"rich_text": [{"text": {"content": truncate(fields.summary)}}]},
            "Value": {"rich_text": [{"text": {"content": truncate(fields.value)}}]},
            "App Inspiration": {"rich_text": [{"text": {"content": truncate(fields.inspiration)}}]},
            "url": {"url": safe_url},
        }
        children = [_block_json(b) for b in self.renderer.blocks(report, self.mapping)]
        return PersistencePayload(
            database_id=self.database_id,
            properties=properties,
            children=children,
        )

    async def send(self, payload: PersistencePayload) -> None:
        """Create the page.

        Raises:
            SinkError: On a non-2xx status, timeout or transport error
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": self.notion_version,
        }
        try:
            status, body = await post_json(self.url, payload.to_json(), headers=headers, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise SinkError(self.name, "timeout") from e
        except aiohttp.ClientError as e:
            raise SinkError(self.name, f"{type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            logger.warning("Notion page create failed | status=%d body=%s", status, body[:200])
            raise SinkError(self.name, f"HTTP {status}", status=status)
        logger.info("Record persisted | title=%s", payload.properties["Name"]["title"][0]["text"]["content"][:60])
