"""
Adapter: Account notifications over SMTP.

Implements Mailer port with smtplib and STARTTLS. When no SMTP
credentials are configured, messages are skipped with a log line
instead of failing.
"""

import html as html_lib
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import NotificationError
from trakvest.domain.portfolio.ports import Mailer

logger = logging.getLogger(__name__)

TEMPLATES = {
    "registration": (
        "Welcome to Trakvest!",
        "Thank you for joining Trakvest. Your account has been successfully created.",
    ),
    "login": (
        "Login Successful",
        "You have successfully logged into your Trakvest account.",
    ),
}


def render_message(kind: str, user: User) -> tuple[str, str, str]:
    """Return subject, plain-text body and HTML body for a notification."""
    subject, message = TEMPLATES[kind]
    text = f"Hello {user.name},\n\n{message}\n\nThe Trakvest team"
    html = (
        "<!DOCTYPE html><html><body>"
        f"<h1>{subject}</h1><p>Hello {html_lib.escape(user.name)},</p><p>{message}</p>"
        "<p>The Trakvest team</p></body></html>"
    )
    return subject, text, html


class SmtpMailer(Mailer):
    """Sends one message per notification over a fresh SMTP connection."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        sender_name: str = "Trakvest",
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender_name = sender_name
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._username and self._password)

    def send_registration(self, user: User) -> None:
        self._send("registration", user)

    def send_login(self, user: User) -> None:
        self._send("login", user)

    def _send(self, kind: str, user: User) -> None:
        if not self.configured:
            logger.info("SMTP not configured; skipping %s email for user=%s", kind, user.id)
            return

        subject, text, html = render_message(kind, user)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{self._sender_name} <{self._username}>"
        msg["To"] = user.email
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.starttls()
                smtp.login(self._username, self._password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(str(exc)) from exc

        logger.info("Sent %s email to user=%s", kind, user.id)
