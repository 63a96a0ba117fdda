"""
Unit tests for the order confirmation mailer.
SMTP is replaced with an in-process fake, so nothing is sent.
"""

import smtplib

import pytest

from freshmarket.services import notifications
from freshmarket.services.notifications import OrderMailer


class RecordingSMTP:
    instances: list["RecordingSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls: list[str] = []
        self.messages = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(f"login:{username}")

    def send_message(self, message):
        self.messages.append(message)


def _mailer(**overrides) -> OrderMailer:
    values = {"host": "smtp.test", "port": 587, "username": "shop@x.com", "password": "pw"}
    values.update(overrides)
    return OrderMailer(**values)


def _send(mailer: OrderMailer) -> bool:
    return mailer.send_order_confirmation(
        order_id="order-1", client_name="Jane", email="jane@example.com", status="Processing"
    )


def test_disabled_without_credentials() -> None:
    assert not _mailer(password=None).enabled
    assert _send(_mailer(password=None)) is False


def test_message_mentions_order_and_status() -> None:
    message = _mailer().build_message(
        order_id="order-1", client_name="Jane", email="jane@example.com", status="Processing"
    )

    assert message["To"] == "jane@example.com"
    assert message["Subject"] == "Order Confirmation"
    assert "order-1" in message.get_content()
    assert "Processing" in message.get_content()


def test_sends_over_starttls(monkeypatch: pytest.MonkeyPatch) -> None:
    RecordingSMTP.instances.clear()
    monkeypatch.setattr(notifications.smtplib, "SMTP", RecordingSMTP)

    assert _send(_mailer()) is True
    smtp = RecordingSMTP.instances[0]
    assert smtp.host == "smtp.test"
    assert smtp.calls == ["starttls", "login:shop@x.com"]
    assert len(smtp.messages) == 1


def test_failure_is_reported_not_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(notifications.smtplib, "SMTP", refuse)

    assert _send(_mailer()) is False


def test_smtp_error_is_reported_not_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    def reject(*args, **kwargs):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(notifications.smtplib, "SMTP", reject)

    assert _send(_mailer()) is False
