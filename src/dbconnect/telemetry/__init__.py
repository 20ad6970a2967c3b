"""OpenTelemetry access for connector spans.

Only the OpenTelemetry API is used here. Spans are exported when the host
application installs an SDK tracer provider and are no-ops otherwise.
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Tracer

from dbconnect.__version__ import __version__

__all__ = [
    "INSTRUMENTATION_NAME",
    "get_tracer",
]

INSTRUMENTATION_NAME = "dbconnect"


def get_tracer(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None) -> Tracer:
    """Return a tracer versioned with the installed dbconnect release by default."""
    return trace.get_tracer(name, version or __version__)
