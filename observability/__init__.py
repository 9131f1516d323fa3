"""Observability module for the weather report.

Uses OpenTelemetry spans, exported to Arize Phoenix when configured.
"""

from .instrumentation import init_tracing, trace_tool, trace_span

__all__ = ["init_tracing", "trace_tool", "trace_span"]
