"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers messages through an SMTP relay with smtplib. Every network
operation is bounded by a timeout; any transport problem is reported
as EmailDeliveryFailure so callers can treat it as best-effort.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from localiz.domain.exceptions import EmailDeliveryFailure

from .base import ComposedEmailSender
from .templates import EmailComposer, EmailContent

logger = logging.getLogger(__name__)


class SmtpEmailSender(ComposedEmailSender):
    """Sends rendered messages through an SMTP server."""

    def __init__(
        self,
        composer: EmailComposer,
        host: str,
        port: int,
        sender: str,
        user: str = "",
        password: str = "",
        use_ssl: bool = True,
        timeout: float = 5.0,
    ) -> None:
        super().__init__(composer)
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._use_ssl = use_ssl
        self._timeout = timeout
        if not user or not password:
            logger.warning("SMTP credentials are not set; emails will likely fail to send")

    def _build_message(self, content: EmailContent) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = content.to
        msg["Subject"] = content.subject
        msg.set_content(content.text)
        msg.add_alternative(content.html, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._use_ssl:
            return smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context)
        client = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        try:
            client.starttls(context=context)
        except (smtplib.SMTPException, OSError):
            client.close()
            raise
        return client

    def deliver(self, content: EmailContent) -> None:
        """
        Send one message.

        Raises:
            EmailDeliveryFailure: connection, authentication, timeout or
                recipient refusal
        """
        msg = self._build_message(content)
        try:
            with self._connect() as client:
                if self._user:
                    client.login(self._user, self._password)
                client.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryFailure(f"{type(e).__name__}: {e}") from e
        logger.info("Email sent: to=%s subject=%s", content.to, content.subject)
