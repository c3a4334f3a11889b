"""
Email notifications for new contact messages

Sending is best-effort: notify_best_effort never raises, it reports what
happened as a NotificationResult for the caller to log.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import Callable, Literal, Optional, Tuple

from pydantic import BaseModel

from config import Settings
from schemas import ContactMessageRecord

logger = logging.getLogger(__name__)


class NotificationResult(BaseModel):
    status: Literal["sent", "skipped", "failed"]
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status == "sent"


def render_notification(record: ContactMessageRecord) -> Tuple[str, str, str]:
    """Build (subject, html_body, text_body) for a stored message.

    Every user-supplied value is HTML-escaped before going into the HTML body.
    """
    received = record.created_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    user_agent = record.meta.user_agent or "Unknown"
    subject = f"New portfolio message from {' '.join(record.name.split())}"

    html_body = f"""
    <h2>New Contact Message</h2>
    <p><strong>Name:</strong> {escape(record.name)}</p>
    <p><strong>Email:</strong> {escape(record.email)}</p>
    <hr/>
    <p style="white-space: pre-wrap">{escape(record.message)}</p>
    <hr/>
    <p><small>Received: {escape(received)}<br/>User agent: {escape(user_agent)}</small></p>
    """

    text_body = (
        "New contact message\n\n"
        f"Name: {record.name}\n"
        f"Email: {record.email}\n\n"
        f"Message:\n{record.message}\n\n"
        "---\n"
        f"Received: {received}\n"
        f"User agent: {user_agent}\n"
    )
    return subject, html_body, text_body


class SmtpNotifier:
    """Delivers contact notifications through an SMTP relay"""

    def __init__(self, settings: Settings, smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None):
        self.settings = settings
        if smtp_factory is None:
            smtp_factory = smtplib.SMTP_SSL if settings.smtp_secure else smtplib.SMTP
        self.smtp_factory = smtp_factory

    @property
    def configured(self) -> bool:
        return self.settings.email_configured

    def build_message(self, record: ContactMessageRecord) -> MIMEMultipart:
        subject, html_body, text_body = render_notification(record)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.settings.from_name, self.settings.sender))
        msg["To"] = self.settings.to_email
        msg["Reply-To"] = record.email
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def send(self, record: ContactMessageRecord) -> None:
        s = self.settings
        msg = self.build_message(record)
        # timeout bounds both the TCP connect and the server greeting
        with self.smtp_factory(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout) as server:
            if not s.smtp_secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if s.smtp_user and s.smtp_pass:
                server.login(s.smtp_user, s.smtp_pass)
            server.sendmail(s.sender, [s.to_email], msg.as_string())


def notify_best_effort(notifier: SmtpNotifier, record: ContactMessageRecord) -> NotificationResult:
    if not notifier.configured:
        logger.info("Email not configured; skipping notification for message %s", record.id)
        return NotificationResult(status="skipped")
    try:
        notifier.send(record)
    except Exception as exc:
        logger.exception("Failed to send notification for message %s", record.id)
        return NotificationResult(status="failed", error=str(exc))
    logger.info("Notification sent for message %s", record.id)
    return NotificationResult(status="sent")
