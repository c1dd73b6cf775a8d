"""Optional Logfire tracing.

When ENABLE_LOGFIRE is set, each flow becomes a span with child spans per
stage (search, generate, sink.*), and the google-genai instrumentation
records every model attempt under the generate span. Without Logfire the
helpers are no-ops apart from a debug timing line.

Requirements:
    pip install 'scout[tracing]'
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

logger = logging.getLogger(__name__)

_logfire: Any = None


def setup_tracing(token: str = "", service_name: str = "scout") -> bool:
    """Configure Logfire and instrument the google-genai client.

    Args:
        token: Logfire write token (empty for local-only output)
        service_name: Service name attached to spans

    Returns:
        True if tracing is active
    """
    global _logfire
    try:
        import logfire
    except ImportError:
        logger.warning("ENABLE_LOGFIRE is set but logfire is not installed; tracing disabled")
        return False

    try:
        logfire.configure(service_name=service_name, token=token or None, send_to_logfire="if-token-present")
        logfire.instrument_google_genai()
    except Exception as e:
        logger.error("Failed to configure Logfire: %s", e)
        return False

    _logfire = logfire
    logger.info("Logfire tracing enabled | service=%s", service_name)
    return True


def tracing_enabled() -> bool:
    return _logfire is not None


@contextmanager
def trace_operation(name: str, attributes: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
    """Wrap a pipeline stage in a span.

    Yields a dict; keys added to it inside the block are set on the span
    when the block exits.
    """
    attrs = attributes or {}
    extra: dict[str, Any] = {}
    start = time.perf_counter()
    try:
        if _logfire is None:
            yield extra
        else:
            with _logfire.span(name, **attrs) as span:
                yield extra
                for key, value in extra.items():
                    span.set_attribute(key, value)
    finally:
        logger.debug("Stage timing | op=%s elapsed=%.2fs", name, time.perf_counter() - start)
