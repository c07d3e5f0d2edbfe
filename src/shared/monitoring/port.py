"""Exception reporter port: where unexpected server faults are sent."""

from abc import ABC, abstractmethod


class ExceptionReporter(ABC):
    @abstractmethod
    async def capture(self, exc: BaseException, tags: dict | None = None, extra: dict | None = None) -> None:
        """Record ``exc`` with searchable ``tags`` and free-form ``extra`` context."""
        ...
