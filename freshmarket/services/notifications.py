"""
Order confirmation e-mail.

Sending is best effort: it runs after the order is committed and any failure
is logged and dropped, so the order itself is never affected.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from fastapi import Request

from freshmarket.core.config import Settings

log = logging.getLogger(__name__)


class OrderMailer:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrderMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.username and self.password)

    def build_message(self, *, order_id: str, client_name: str, email: str, status: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = "Order Confirmation"
        message["From"] = self.username or "no-reply@localhost"
        message["To"] = email
        message.set_content(
            f"Dear {client_name},\n\n"
            f"Your order {order_id} has been received and is currently {status}.\n\n"
            "Thank you for shopping with Fresh Produce Platform."
        )
        return message

    def send_order_confirmation(self, *, order_id: str, client_name: str, email: str, status: str) -> bool:
        """Send the confirmation; returns False instead of raising on failure."""
        if not self.enabled:
            log.info("Mail credentials not configured; skipping confirmation for order %s", order_id)
            return False

        message = self.build_message(order_id=order_id, client_name=client_name, email=email, status=status)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            log.exception("Failed to send confirmation for order %s to %s", order_id, email)
            return False

        log.info("Confirmation sent for order %s to %s", order_id, email)
        return True


def get_mailer(request: Request) -> OrderMailer:
    return request.app.state.mailer
