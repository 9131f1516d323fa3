"""OpenTelemetry instrumentation for the weather report.

This module provides the tracer used by the fetcher, the cache and the
report flow, plus decorators that wrap a call in a span.
"""

import functools
import json
import logging
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel

# Type variable for preserving function signatures
F = TypeVar("F", bound=Callable[..., Any])

TRACER_NAME = "weather-report"

logger = logging.getLogger(__name__)

# Global tracer instance
_tracer: trace.Tracer | None = None


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def init_tracing(
    endpoint: str,
    project_name: str = TRACER_NAME,
) -> None:
    """Send spans to a Phoenix collector.

    Without this call the OpenTelemetry API stays a no-op and the
    decorators below cost almost nothing.

    Args:
        endpoint: Phoenix collector endpoint, e.g.
            ``http://localhost:6006/v1/traces``.
        project_name: Name of the project in Phoenix dashboard.
    """
    from phoenix.otel import register

    tracer_provider = register(
        project_name=project_name,
        endpoint=endpoint,
    )

    global _tracer
    _tracer = trace.get_tracer(TRACER_NAME, tracer_provider=tracer_provider)

    logger.info(f"Tracing initialized for project {project_name}, sending to {endpoint}")


def _serialize_value(value: Any) -> str:
    """Serialize a value to string for span attributes."""
    try:
        if isinstance(value, BaseModel):
            return value.model_dump_json()
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False, default=str)
        return str(value)
    except Exception:
        return repr(value)


def trace_tool(
    name: str | None = None,
    capture_input: bool = True,
    capture_output: bool = True,
) -> Callable[[F], F]:
    """Decorator to trace an operation with input/output capture.

    Args:
        name: Custom span name. Defaults to ``tool.<function name>``.
        capture_input: Whether to capture input arguments. Defaults to True.
        capture_output: Whether to capture return value. Defaults to True.

    Returns:
        Decorated function with tracing.

    Example:
        @trace_tool(name="weather_api.fetch")
        def fetch(self, city_name: str) -> WeatherRecord:
            ...
    """
    def decorator(func: F) -> F:
        span_name = name or f"tool.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(span_name) as span:
                span.set_attribute("tool.name", func.__qualname__)

                if capture_input:
                    if args:
                        span.set_attribute("input.args", _serialize_value(list(args)))
                    if kwargs:
                        span.set_attribute("input.kwargs", _serialize_value(kwargs))

                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.set_attribute("error.type", type(e).__name__)
                    span.set_attribute("error.message", str(e))
                    raise

                if capture_output and result is not None:
                    span.set_attribute("output.result", _serialize_value(result))
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper  # type: ignore

    return decorator


def trace_span(name: str) -> Callable[[F], F]:
    """Simple decorator to create a named span around a function.

    Args:
        name: Span name.

    Returns:
        Decorated function with tracing.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with get_tracer().start_as_current_span(name) as span:
                span.set_attribute("function.name", func.__name__)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper  # type: ignore

    return decorator
