"""Exception reporting for server-side faults."""

import os

from shared.monitoring.port import ExceptionReporter


def build_reporter() -> ExceptionReporter:
    """Build the reporter selected by ``STOREFRONT_REPORTER_ADAPTER`` (default: log)."""
    adapter = os.environ.get("STOREFRONT_REPORTER_ADAPTER", "log")
    if adapter == "log":
        from shared.monitoring.log_adapter import LogExceptionReporter

        return LogExceptionReporter()
    raise ValueError(f"Unknown exception reporter adapter: {adapter}")


__all__ = ["ExceptionReporter", "build_reporter"]
