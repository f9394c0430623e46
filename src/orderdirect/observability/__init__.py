"""OpenTelemetry instrumentation and observability utilities."""

from orderdirect.observability.config import configure_logging, setup_observability
from orderdirect.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
