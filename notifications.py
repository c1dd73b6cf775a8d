"""Chat notification sink (Discord webhook).

The webhook takes a JSON body with a single human-readable 'content'
field, which Discord caps at MAX_CONTENT_LENGTH characters; longer
messages are cut and end with an ellipsis. Any 2xx response is success;
anything else, or a transport error, raises SinkError.

Output Format:
    📅 **YYYY-MM-DD <flow label>**
    ----------------------------------
    <renderer lines>
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

import aiohttp

from models.report import Report
from rendering import RecordMapping, ReportRenderer
from sinks import SinkError
from tools.utils import post_json

logger = logging.getLogger(__name__)

RULE = "----------------------------------"
MAX_CONTENT_LENGTH = 2000


@dataclass(frozen=True)
class NotificationPayload:
    """Chat message rendered from a report."""

    content: str

    def to_json(self) -> dict[str, str]:
        return {"content": self.content}


class NotificationSink:
    """Sends a rendered report to a chat webhook.

    Example:
        >>> sink = NotificationSink(url, label="AI 论文情报", renderer=renderer, mapping=mapping)
        >>> await sink.send(sink.render(report))
    """

    name = "notification"

    def __init__(
        self,
        webhook_url: str,
        label: str,
        renderer: ReportRenderer,
        mapping: RecordMapping,
        timeout: float = 10.0,
        today: date | None = None,
    ):
        self.webhook_url = webhook_url
        self.label = label
        self.renderer = renderer
        self.mapping = mapping
        self.timeout = timeout
        self.today = today

    def render(self, report: Report) -> NotificationPayload:
        """Build the chat message for a report."""
        today = self.today or date.today()
        lines = [
            f"📅 **{today.isoformat()} {self.label}**",
            RULE,
            *self.renderer.message_lines(report, self.mapping),
        ]
        content = "\n".join(lines)
        if len(content) > MAX_CONTENT_LENGTH:
            logger.warning("Message too long, cut | chars=%d limit=%d", len(content), MAX_CONTENT_LENGTH)
            content = content[: MAX_CONTENT_LENGTH - 1] + "…"
        return NotificationPayload(content=content)

    async def send(self, payload: NotificationPayload) -> None:
        """POST the message to the webhook.

        Raises:
            SinkError: On a non-2xx status, timeout or transport error
        """
        try:
            status, body = await post_json(self.webhook_url, payload.to_json(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Webhook timeout | url=%s", self.webhook_url[:50])
            raise SinkError(self.name, "timeout") from e
        except aiohttp.ClientError as e:
            raise SinkError(self.name, f"{type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            logger.warning("Webhook failed | status=%d body=%s", status, body[:200])
            raise SinkError(self.name, f"HTTP {status}", status=status)
        logger.info("Notification sent | chars=%d", len(payload.content))
