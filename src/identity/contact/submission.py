"""Contact form submission: command, handler and delivery."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from identity.contact.email_port import EmailSender
from identity.contact.message import ContactMessage
from identity.domain import identity
from shared.logging import get_logger

logger = get_logger(__name__)


@identity.command(part_of="ContactMessage")
class SubmitContactMessage:
    """Store a message addressed to the support team."""

    user_id: Identifier(required=True)
    email: String(required=True, max_length=254)
    subject: String(required=True, max_length=100)
    message: Text(required=True)


@identity.command(part_of="ContactMessage")
class RecordDelivery:
    """Record the outcome of handing a contact message to the mail sender."""

    message_id: Identifier(required=True)
    delivery_id: String(max_length=50)
    error: String(max_length=255)


@identity.command_handler(part_of=ContactMessage)
class ContactMessageHandler:
    @handle(SubmitContactMessage)
    def submit(self, command):
        contact = ContactMessage.receive(
            user_id=command.user_id,
            email=command.email,
            subject=command.subject,
            message=command.message,
        )
        current_domain.repository_for(ContactMessage).add(contact)
        return str(contact.id)

    @handle(RecordDelivery)
    def record_delivery(self, command):
        repo = current_domain.repository_for(ContactMessage)
        contact = repo.get(command.message_id)
        if command.error:
            contact.mark_failed(command.error)
        else:
            contact.mark_sent(command.delivery_id)
        repo.add(contact)
        return contact.status


async def deliver(sender: EmailSender, support_email: str, message_id: str) -> str:
    """Send a stored contact message to the support mailbox.

    Returns the message's resulting status. A failed delivery is recorded on
    the message, not raised.
    """
    contact = current_domain.repository_for(ContactMessage).get(message_id)
    body = f"From: {contact.email} (user {contact.user_id})\n\n{contact.message}"
    try:
        result = await sender.send(
            to=support_email,
            subject=f"[Contact] {contact.subject}",
            body=body,
            reply_to=contact.email,
        )
    except Exception as exc:
        logger.error("Contact email delivery raised", message_id=message_id, error=str(exc), exc_info=exc)
        result = {"status": "failed", "error": str(exc)}

    if result.get("status") == "sent":
        command = RecordDelivery(message_id=message_id, delivery_id=result.get("message_id"))
    else:
        logger.warning("Contact email not delivered", message_id=message_id, error=result.get("error"))
        command = RecordDelivery(message_id=message_id, error=result.get("error") or "Email delivery failed")
    return current_domain.process(command, asynchronous=False)
