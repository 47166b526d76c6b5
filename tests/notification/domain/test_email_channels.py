"""Email channel selection and the SMTP adapter."""

import smtplib

from storefront.notification.channel import get_email_channel, reset_email_channel
from storefront.notification.channel.fake_email import FakeEmailAdapter
from storefront.notification.channel.smtp_email import SmtpEmailAdapter, SmtpSettings


class _RecordingSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, message):
        self.sent.append(message)


class _RefusingSMTP(_RecordingSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})


class TestChannelSelection:
    def test_fake_without_smtp_host(self, monkeypatch):
        monkeypatch.delenv("SMTP_HOST", raising=False)
        reset_email_channel()
        assert isinstance(get_email_channel(), FakeEmailAdapter)

    def test_smtp_with_host(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "mail.example.com")
        monkeypatch.setenv("SMTP_USER", "shop@example.com")
        reset_email_channel()
        channel = get_email_channel()
        assert isinstance(channel, SmtpEmailAdapter)
        assert channel.settings.from_email == "shop@example.com"


class TestSmtpAdapter:
    def test_sends_message(self, monkeypatch):
        _RecordingSMTP.sent = []
        monkeypatch.setattr(smtplib, "SMTP", _RecordingSMTP)
        adapter = SmtpEmailAdapter(SmtpSettings(host="mail.example.com", from_email="shop@example.com"))

        result = adapter.send(to="a@example.com", subject="Hello", body="Body", html_body="<p>Body</p>")

        assert result["status"] == "sent"
        message = _RecordingSMTP.sent[0]
        assert message["To"] == "a@example.com"
        assert message["From"] == "shop@example.com"
        assert message.is_multipart()

    def test_refused_delivery_is_reported(self, monkeypatch):
        monkeypatch.setattr(smtplib, "SMTP", _RefusingSMTP)
        adapter = SmtpEmailAdapter(SmtpSettings(host="mail.example.com"))

        result = adapter.send(to="a@example.com", subject="Hello", body="Body")

        assert result["status"] == "failed"
        assert result["message_id"] is None
