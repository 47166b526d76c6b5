"""Email channel registry.

Hands out one adapter per process: SMTP when ``SMTP_HOST`` is set, the
in-memory fake otherwise. Tests swap adapters with ``set_email_channel``.
"""

import os

from storefront.notification.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        if os.getenv("SMTP_HOST"):
            from storefront.notification.channel.smtp_email import SmtpEmailAdapter, SmtpSettings

            _email_channel = SmtpEmailAdapter(SmtpSettings.from_env())
        else:
            from storefront.notification.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    """Forget the current adapter (useful for testing)."""
    global _email_channel
    _email_channel = None
