"""Email notifiers: SMTP delivery and a logging stand-in for environments without SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from iam_core.app.services.email_notifier import EmailDeliveryError, IEmailNotifier

logger = logging.getLogger(__name__)


class LoggingEmailNotifier(IEmailNotifier):
    """Writes the message subject to the log instead of sending it"""

    async def send(self, to: str, subject: str, body: str) -> None:
        logger.info("SMTP configuration missing; skipping email to %s (%s)", to, subject)


class SmtpEmailNotifier(IEmailNotifier):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.timeout = timeout

    async def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["To"] = to
        message["From"] = self.sender
        message.set_content(body)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Failed to send email to {to}") from exc

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.username and self.password:
                # credentials never go over an unencrypted connection
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(message)
