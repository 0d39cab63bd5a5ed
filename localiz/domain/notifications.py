"""Best-effort delivery of transactional email."""

import logging
from collections.abc import Callable

from .exceptions import EmailDeliveryFailure

logger = logging.getLogger(__name__)


def send_best_effort(kind: str, send: Callable[..., None], *args: object) -> bool:
    """
    Run an email send whose failure must not fail the enclosing request.

    Email senders report delivery problems as EmailDeliveryFailure;
    those are logged and reported as False. Anything else propagates.

    Returns:
        True if the sender accepted the message
    """
    try:
        send(*args)
    except EmailDeliveryFailure as exc:
        logger.warning("Email delivery failed: kind=%s reason=%s", kind, exc.message)
        return False
    return True
