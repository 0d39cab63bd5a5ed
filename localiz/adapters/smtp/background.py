"""
Background email sender - Runs deliveries off the request path.

Wraps another EmailSender and submits each send to a bounded thread
pool. At most ``max_queued`` sends may be waiting or running; past
that, new sends are dropped with a warning. Failures travel through
the future's own channel and end up in the log; they never reach the
request that triggered the send.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from localiz.domain.exceptions import EmailDeliveryFailure
from localiz.domain.models import ContactMessage
from localiz.domain.ports import EmailSender

logger = logging.getLogger(__name__)


class BackgroundEmailSender:
    """Implements EmailSender protocol by delegating to a worker pool."""

    def __init__(self, inner: EmailSender, max_workers: int = 4, max_queued: int = 100) -> None:
        self._inner = inner
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")
        self._slots = threading.BoundedSemaphore(max(max_queued, max_workers))

    def _dispatch(self, kind: str, send: Callable[..., None], *args: object) -> Future | None:
        if not self._slots.acquire(blocking=False):
            logger.warning("Email backlog full, dropping send: kind=%s", kind)
            return None
        try:
            future = self._executor.submit(send, *args)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(lambda f: self._finish(kind, f))
        return future

    def _finish(self, kind: str, future: Future) -> None:
        self._slots.release()
        self._report(kind, future)

    @staticmethod
    def _report(kind: str, future: Future) -> None:
        exc = future.exception()
        if exc is None:
            return
        if isinstance(exc, EmailDeliveryFailure):
            logger.warning("Background email failed: kind=%s reason=%s", kind, exc.message)
        else:
            logger.error("Background email crashed: kind=%s", kind, exc_info=exc)

    def send_confirmation(self, email: str, token: str) -> None:
        self._dispatch("confirmation", self._inner.send_confirmation, email, token)

    def send_welcome(self, email: str, username: str) -> None:
        self._dispatch("welcome", self._inner.send_welcome, email, username)

    def send_password_reset(self, email: str, token: str) -> None:
        self._dispatch("password_reset", self._inner.send_password_reset, email, token)

    def send_password_changed(self, email: str, username: str) -> None:
        self._dispatch("password_changed", self._inner.send_password_changed, email, username)

    def send_contact_notification(self, message: ContactMessage) -> None:
        self._dispatch("contact_notification", self._inner.send_contact_notification, message)

    def send_contact_acknowledgment(self, message: ContactMessage) -> None:
        self._dispatch("contact_acknowledgment", self._inner.send_contact_acknowledgment, message)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting sends; optionally wait for queued ones."""
        self._executor.shutdown(wait=wait)
