import functools
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from dbconnect.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])
AttributeGetter = Callable[..., Optional[Dict[str, Any]]]

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from dbconnect.logging import get_logger
        logger = get_logger(__name__)
    return logger


def _set_attributes(span: Span, getter: Optional[AttributeGetter], *args: Any, **kwargs: Any) -> None:
    if getter is None:
        return
    try:
        attributes = getter(*args, **kwargs) or {}
    except Exception as exc:  # pragma: no cover
        _get_logger().warning("Span attribute getter failed: %s", exc)
        return
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value)


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.CLIENT,
    attribute_getter: Optional[AttributeGetter] = None,
    result_attributes: Optional[Callable[[Any], Optional[Dict[str, Any]]]] = None,
) -> Callable[[F], F]:
    """Run a connector operation inside an OpenTelemetry span.

    Attributes are gathered twice: from the call arguments before the
    operation runs and from its return value afterwards. A failing
    operation marks the span as errored; connector errors also record
    their error code.

    Args:
        span_name: Span name. Defaults to the module-qualified function name.
        kind: Span kind. Remote database calls default to CLIENT.
        attribute_getter: Called with the operation's arguments.
        result_attributes: Called with the operation's return value.
    """

    def decorator(func: F) -> F:
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(name, kind=kind, record_exception=False) as span:
                _set_attributes(span, attribute_getter, *args, **kwargs)
                try:
                    result = func(*args, **kwargs)
                except Exception as exc:
                    error_code = getattr(exc, "error_code", None)
                    if error_code is not None:
                        span.set_attribute("dbconnect.error_code", error_code.value)
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise
                _set_attributes(span, result_attributes, result)
                return result

        return wrapper  # type: ignore[return-value]

    return decorator
