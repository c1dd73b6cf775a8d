"""Common sink interface and error type.

A sink renders a validated Report into its own payload and sends it.
Sends are fire-and-forget: nothing is read back into the report, and a
failure never undoes a write already made to another sink.
"""

from typing import Any, Protocol

from models.report import Report


class SinkError(Exception):
    """Raised when a notification or persistence call fails.

    Attributes:
        sink: Name of the failing sink ('notification' or 'persistence')
        status: HTTP status if the destination answered, else None
    """

    def __init__(self, sink: str, reason: str, status: int | None = None):
        self.sink = sink
        self.status = status
        super().__init__(f"{sink} sink failed: {reason}")


class Sink(Protocol):
    """Render-then-send destination for a report."""

    name: str

    def render(self, report: Report) -> Any:
        ...

    async def send(self, payload: Any) -> None:
        ...
