"""Mail delivery collaborator used by the reminder sweep."""
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    text: str


class SMTPMailer:
    """Sends plain-text mail over SMTP with a bounded socket timeout."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        timeout: Optional[int] = None,
        sender: Optional[str] = None,
    ) -> None:
        """Unset arguments fall back to the current ``SMTP_*`` / ``MAIL_FROM`` settings."""
        self.host = settings.SMTP_HOST if host is None else host
        self.port = settings.SMTP_PORT if port is None else port
        self.username = settings.SMTP_USERNAME if username is None else username
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.timeout = settings.SMTP_TIMEOUT_SECONDS if timeout is None else timeout
        self.sender = settings.MAIL_FROM if sender is None else sender

    def send(self, message: MailMessage) -> None:
        """Deliver one message. Raises ``smtplib.SMTPException`` or ``OSError`` on failure."""
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.text)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(email)
        logger.debug("Mail '%s' delivered to %s", message.subject, message.to)
