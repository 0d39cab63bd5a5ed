"""
Email templates - Subject, plain-text and HTML bodies for each message.

The composer is built once at startup with the front-end base URL and
the support address; it holds no other state.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from urllib.parse import quote

from localiz.domain.models import ContactMessage

PRIMARY_COLOR = "#1b9476"
TEXT_COLOR = "#124660"
MUTED_COLOR = "#334155"
BACKGROUND_COLOR = "#f4ebd6"


@dataclass(frozen=True)
class EmailContent:
    """A fully rendered message."""

    to: str
    subject: str
    text: str
    html: str
    link: str | None = None


def _layout(heading: str, body_html: str, support_email: str, cta_text: str | None, cta_url: str | None) -> str:
    cta = ""
    if cta_url:
        cta = (
            f'<p style="margin:24px 0"><a href="{escape(cta_url)}" '
            f'style="background-color:{PRIMARY_COLOR};color:#fff;text-decoration:none;'
            f'padding:12px 18px;border-radius:12px;display:inline-block;">{escape(cta_text or "")}</a></p>'
        )
    year = datetime.now(timezone.utc).year
    return (
        f'<div style="background:{BACKGROUND_COLOR};padding:24px;font-family:Arial,Helvetica,sans-serif;">'
        f'<div style="max-width:560px;margin:0 auto;background:#ffffff;border-radius:12px;padding:24px;">'
        f'<h1 style="color:{TEXT_COLOR};font-size:22px;">{escape(heading)}</h1>'
        f'<div style="color:{MUTED_COLOR};font-size:15px;line-height:1.5;">{body_html}</div>'
        f"{cta}"
        f'<p style="color:#64748b;font-size:12px;">Questions? '
        f'<a href="mailto:{escape(support_email)}">{escape(support_email)}</a><br/>&copy; {year} Localiz</p>'
        f"</div></div>"
    )


class EmailComposer:
    """Renders every transactional email Localiz sends."""

    def __init__(self, front_url: str, support_email: str) -> None:
        self._front_url = front_url.rstrip("/")
        self._support_email = support_email

    @property
    def support_email(self) -> str:
        return self._support_email

    def confirmation(self, email: str, token: str) -> EmailContent:
        link = f"{self._front_url}/confirm-email?token={quote(token)}"
        text = (
            "Thanks for creating a Localiz account. To confirm your email address, "
            f"open the link below:\n\n{link}\n\nThe link is valid for one hour."
        )
        html = _layout(
            "Welcome to Localiz!",
            "<p>Thanks for creating a Localiz account. Confirm your email address "
            "to activate your account. The link is valid for one hour.</p>",
            self._support_email,
            "Confirm my email",
            link,
        )
        return EmailContent(email, "Confirm your email - Localiz", text, html, link)

    def welcome(self, email: str, username: str) -> EmailContent:
        link = f"{self._front_url}/login"
        name = username or "there"
        text = f"Hello {name},\n\nYour Localiz account is now active. Log in here: {link}"
        html = _layout(
            f"Hello {name},",
            "<p>Your Localiz account is now active.</p>",
            self._support_email,
            "Log in",
            link,
        )
        return EmailContent(email, "Welcome - account activated", text, html, link)

    def password_reset(self, email: str, token: str) -> EmailContent:
        link = f"{self._front_url}/reset-password/{quote(token)}"
        text = (
            "A password reset was requested for your Localiz account. "
            f"Open the link below within one hour to choose a new password:\n\n{link}\n\n"
            "If you did not ask for this, ignore this email."
        )
        html = _layout(
            "Reset your password",
            "<p>A password reset was requested for your Localiz account. The link is valid "
            "for one hour. If you did not ask for this, ignore this email.</p>",
            self._support_email,
            "Choose a new password",
            link,
        )
        return EmailContent(email, "Reset your password - Localiz", text, html, link)

    def password_changed(self, email: str, username: str) -> EmailContent:
        link = f"{self._front_url}/login"
        name = username or "there"
        text = (
            f"Hello {name},\n\nYour password was changed. If you did not make this change, "
            f"contact {self._support_email} immediately."
        )
        html = _layout(
            f"Hello {name},",
            "<p>Your password was changed. If you did not make this change, contact support immediately.</p>",
            self._support_email,
            "Log in",
            link,
        )
        return EmailContent(email, "Your password was updated - Localiz", text, html, link)

    def contact_notification(self, message: ContactMessage) -> EmailContent:
        link = f"{self._front_url}/admin/messages"
        text = (
            f"Name: {message.name}\nEmail: {message.email}\nSubject: {message.subject}\n\n"
            f"{message.message}\n\nMessages: {link}"
        )
        body = (
            f"<p><strong>Name:</strong> {escape(message.name)}</p>"
            f"<p><strong>Email:</strong> {escape(message.email)}</p>"
            f"<p><strong>Subject:</strong> {escape(message.subject)}</p><hr/>"
            f"<div>{escape(message.message).replace(chr(10), '<br/>')}</div>"
        )
        html = _layout("New contact message", body, self._support_email, "View messages", link)
        return EmailContent(
            self._support_email, f"New contact message: {message.subject}", text, html, link
        )

    def contact_acknowledgment(self, message: ContactMessage) -> EmailContent:
        text = (
            f"Hello {message.name},\n\nWe received your message \"{message.subject}\" "
            "and will get back to you soon."
        )
        html = _layout(
            f"Hello {message.name},",
            f"<p>We received your message and will get back to you soon.</p>"
            f"<p><strong>Subject:</strong> {escape(message.subject)}</p>",
            self._support_email,
            None,
            None,
        )
        return EmailContent(message.email, "We received your message", text, html)
