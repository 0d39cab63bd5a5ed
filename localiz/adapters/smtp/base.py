"""Shared EmailSender implementation: compose, then deliver."""

from localiz.domain.models import ContactMessage

from .templates import EmailComposer, EmailContent


class ComposedEmailSender:
    """
    Implements the EmailSender protocol on top of an EmailComposer.

    Subclasses only decide how a rendered message is delivered.
    """

    def __init__(self, composer: EmailComposer) -> None:
        self._composer = composer

    def deliver(self, content: EmailContent) -> None:
        raise NotImplementedError

    def send_confirmation(self, email: str, token: str) -> None:
        self.deliver(self._composer.confirmation(email, token))

    def send_welcome(self, email: str, username: str) -> None:
        self.deliver(self._composer.welcome(email, username))

    def send_password_reset(self, email: str, token: str) -> None:
        self.deliver(self._composer.password_reset(email, token))

    def send_password_changed(self, email: str, username: str) -> None:
        self.deliver(self._composer.password_changed(email, username))

    def send_contact_notification(self, message: ContactMessage) -> None:
        self.deliver(self._composer.contact_notification(message))

    def send_contact_acknowledgment(self, message: ContactMessage) -> None:
        self.deliver(self._composer.contact_acknowledgment(message))
