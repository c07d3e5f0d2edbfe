"""Email port: abstract interface for outbound email."""

from abc import ABC, abstractmethod


class EmailSender(ABC):
    """Abstract interface for email delivery adapters."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        reply_to: str | None = None,
    ) -> dict:
        """Send an email message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
