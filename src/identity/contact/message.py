"""ContactMessage aggregate: a message sent through the contact form."""

from datetime import datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from identity.domain import identity


class ContactStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


@identity.event(part_of="ContactMessage")
class ContactMessageReceived:
    __version__ = 1

    message_id: Identifier(required=True)
    user_id: Identifier(required=True)
    subject: String(required=True)


@identity.aggregate
class ContactMessage:
    user_id: Identifier(required=True)
    email: String(required=True, max_length=254)
    subject: String(required=True, min_length=3, max_length=100)
    message: Text(required=True)
    status: String(
        max_length=10,
        choices=ContactStatus,
        default=ContactStatus.PENDING.value,
    )
    failure_reason: String(max_length=255)
    delivery_id: String(max_length=50)
    created_at: DateTime(default=datetime.now)
    delivered_at: DateTime()

    @classmethod
    def receive(cls, user_id, email, subject, message):
        from protean.exceptions import ValidationError

        text = (message or "").strip()
        if not 10 <= len(text) <= 1000:
            raise ValidationError({"message": ["Message must be between 10 and 1000 characters"]})

        contact = cls(user_id=user_id, email=email, subject=(subject or "").strip(), message=text)
        contact.raise_(
            ContactMessageReceived(
                message_id=contact.id,
                user_id=user_id,
                subject=contact.subject,
            )
        )
        return contact

    def mark_sent(self, delivery_id):
        self.status = ContactStatus.SENT.value
        self.delivery_id = delivery_id
        self.delivered_at = datetime.now()

    def mark_failed(self, reason):
        self.status = ContactStatus.FAILED.value
        self.failure_reason = (reason or "")[:255]
