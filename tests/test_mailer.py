import smtplib
from datetime import datetime

import pytest

from tux_letter.config import MailConfig
from tux_letter.core.types import NotificationPayload
from tux_letter.notify.mailer import Mailer


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_login = False

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.logged_in = None
        self.sent = []
        self.started_tls = False
        self.closed = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        return (250, b"ok")

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, user, password):
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.logged_in = (user, password)

    def close(self):
        self.closed = True

    def noop(self):
        return (250, b"ok")

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _payload() -> NotificationPayload:
    return NotificationPayload(
        text="Digest body",
        references=["https://example.com/a"],
        source_counts={"lore": 1},
        total_items=1,
    )


def test_missing_password_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("GMAIL_APP_PASSWORD", raising=False)

    with pytest.raises(ValueError, match="GMAIL_APP_PASSWORD"):
        Mailer(MailConfig())


def test_credentials_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("GMAIL_USER", "bot@example.com")
    monkeypatch.setenv("GMAIL_APP_PASSWORD", "app-pass")

    mailer = Mailer(MailConfig())

    assert (mailer.sender, mailer.password) == ("bot@example.com", "app-pass")


def test_default_sender_when_user_unset(monkeypatch) -> None:
    monkeypatch.delenv("GMAIL_USER", raising=False)
    monkeypatch.setenv("GMAIL_APP_PASSWORD", "app-pass")

    assert Mailer(MailConfig()).sender == "tuxletter@gmail.com"


def test_message_is_multipart_alternative() -> None:
    mailer = Mailer(MailConfig(recipient="reader@example.com"), sender="bot@example.com", password="x")

    msg = mailer.build_message(_payload(), datetime(2024, 5, 12, 20, 0))

    assert msg.get_content_subtype() == "alternative"
    assert msg["Subject"] == "Tux Letter • 2024-05-12 • 1 updates"
    assert msg["To"] == "reader@example.com"
    assert "bot@example.com" in msg["From"]
    assert "Tux Letter" in msg["From"]
    parts = msg.get_payload()
    assert [part.get_content_type() for part in parts] == ["text/plain", "text/html"]


def test_send_over_ssl(fake_smtp) -> None:
    cfg = MailConfig(recipient="reader@example.com")
    mailer = Mailer(cfg, sender="bot@example.com", password="app-pass")

    mailer.send(_payload())

    server = fake_smtp.instances[-1]
    assert (server.host, server.port) == ("smtp.gmail.com", 465)
    assert server.logged_in == ("bot@example.com", "app-pass")
    sender, recipients, _ = server.sent[0]
    assert sender == "bot@example.com"
    assert recipients == ["reader@example.com"]


def test_send_with_starttls(fake_smtp) -> None:
    cfg = MailConfig(smtp_port=587, use_ssl=False)
    mailer = Mailer(cfg, sender="bot@example.com", password="app-pass")

    mailer.send(_payload())

    assert fake_smtp.instances[-1].started_tls is True


def test_send_failure_propagates(fake_smtp) -> None:
    fake_smtp.fail_login = True
    mailer = Mailer(MailConfig(), sender="bot@example.com", password="wrong")

    with pytest.raises(smtplib.SMTPAuthenticationError):
        mailer.send(_payload())


def test_connection_check(fake_smtp) -> None:
    mailer = Mailer(MailConfig(), sender="bot@example.com", password="app-pass")
    assert mailer.test_connection() is True

    fake_smtp.fail_login = True
    assert mailer.test_connection() is False


@pytest.mark.parametrize("use_ssl", [True, False])
def test_rejected_login_closes_connection(fake_smtp, use_ssl) -> None:
    fake_smtp.fail_login = True
    mailer = Mailer(MailConfig(use_ssl=use_ssl), sender="bot@example.com", password="wrong")

    with pytest.raises(smtplib.SMTPAuthenticationError):
        mailer.send(_payload())

    server = fake_smtp.instances[-1]
    assert server.closed is True
    assert server.sent == []
