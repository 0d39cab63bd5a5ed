"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging each message and its link for development.
"""

import logging

from .base import ComposedEmailSender
from .templates import EmailContent

logger = logging.getLogger(__name__)


class ConsoleEmailSender(ComposedEmailSender):
    """
    Implements EmailSender protocol via console logging.

    For demo/development purposes - prints links to stdout instead of
    sending mail, so the confirmation flow can be followed from the logs.
    """

    def deliver(self, content: EmailContent) -> None:
        """
        Log the message (simulates email delivery).

        The link is logged at INFO level so it shows up in the server log.
        """
        logger.info(
            "[EMAIL] To: %s Subject: %s Link: %s",
            content.to,
            content.subject,
            content.link or "-",
        )
