"""Contact domain service - Messages sent through the public contact form."""

import logging
from dataclasses import dataclass

from .exceptions import InvalidContent, ResourceNotFound
from .models import ContactMessage, Page
from .notifications import send_best_effort
from .policy import normalize_email
from .ports import ContactRepository, EmailSender

logger = logging.getLogger(__name__)

MAX_SUBJECT_LENGTH = 150
MIN_MESSAGE_LENGTH = 20


@dataclass
class ContactService:
    messages: ContactRepository
    email_sender: EmailSender

    def submit(self, name: str, email: str, subject: str, message: str) -> ContactMessage:
        """Store a contact message, then notify support and the sender (best-effort)."""
        name, subject, message = name.strip(), subject.strip(), message.strip()
        if not name:
            raise InvalidContent("Name is required")
        if not subject or len(subject) > MAX_SUBJECT_LENGTH:
            raise InvalidContent(f"Subject is required and limited to {MAX_SUBJECT_LENGTH} characters")
        if len(message) < MIN_MESSAGE_LENGTH:
            raise InvalidContent("Message is too short")

        stored = self.messages.add(
            ContactMessage(name=name, email=normalize_email(email), subject=subject, message=message)
        )
        logger.info("Contact message stored: id=%s", stored.id)

        send_best_effort("contact_notification", self.email_sender.send_contact_notification, stored)
        send_best_effort("contact_acknowledgment", self.email_sender.send_contact_acknowledgment, stored)
        return stored

    def list(self, page: int = 1, limit: int = 20, archived: bool | None = None) -> Page:
        page = max(page, 1)
        limit = min(max(limit, 5), 50)
        return self.messages.list(page, limit, archived)

    def archive(self, message_id: str) -> None:
        if not self.messages.set_archived(message_id, True):
            raise ResourceNotFound("Message not found")

    def unarchive(self, message_id: str) -> None:
        if not self.messages.set_archived(message_id, False):
            raise ResourceNotFound("Message not found")
