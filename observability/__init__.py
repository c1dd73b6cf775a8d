"""Logging and optional tracing for scheduled runs."""

from observability.logging import clear_context, set_flow_context, set_run_context, setup_logging
from observability.tracing import setup_tracing, trace_operation, tracing_enabled

__all__ = [
    "setup_logging",
    "set_run_context",
    "set_flow_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "tracing_enabled",
]
