"""Exception reporter that writes to the structured log.

Keeps every captured exception in ``captured`` so tests can assert on what
was reported.
"""

from dataclasses import dataclass, field

from shared.logging import get_logger
from shared.monitoring.port import ExceptionReporter

logger = get_logger(__name__)


@dataclass
class CapturedException:
    exception: BaseException
    tags: dict = field(default_factory=dict)
    extra: dict = field(default_factory=dict)


class LogExceptionReporter(ExceptionReporter):
    def __init__(self):
        self.captured: list[CapturedException] = []

    async def capture(self, exc: BaseException, tags: dict | None = None, extra: dict | None = None) -> None:
        record = CapturedException(exception=exc, tags=dict(tags or {}), extra=dict(extra or {}))
        self.captured.append(record)
        logger.error(
            "Exception captured",
            error_type=type(exc).__name__,
            error=str(exc),
            tags=record.tags,
            extra=record.extra,
        )

    def reset(self) -> None:
        self.captured.clear()
