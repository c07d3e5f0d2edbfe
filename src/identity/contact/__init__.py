"""Email sender registry.

Uses the fake sender by default; ``STOREFRONT_EMAIL_ADAPTER`` selects
another adapter once one is configured.
"""

import os

from identity.contact.email_port import EmailSender


def build_email_sender() -> EmailSender:
    adapter = os.getenv("STOREFRONT_EMAIL_ADAPTER", "fake")
    if adapter == "fake":
        from identity.contact.fake_email import FakeEmailSender

        return FakeEmailSender()
    raise ValueError(f"Unknown email adapter: {adapter}")
