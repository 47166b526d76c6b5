"""SMTP email adapter.

Configured from the environment:
    SMTP_HOST, SMTP_PORT (default 587), SMTP_USER, SMTP_PASSWORD,
    FROM_EMAIL (default: SMTP_USER), SMTP_USE_TLS (default on)
"""

import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

import structlog

from storefront.notification.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    user: str | None = None
    password: str | None = None
    from_email: str | None = None
    use_tls: bool = True
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "SmtpSettings":
        user = os.getenv("SMTP_USER")
        return cls(
            host=os.environ["SMTP_HOST"],
            port=int(os.getenv("SMTP_PORT", "587")),
            user=user,
            password=os.getenv("SMTP_PASSWORD"),
            from_email=os.getenv("FROM_EMAIL") or user,
            use_tls=os.getenv("SMTP_USE_TLS", "1") not in ("0", "false", "no"),
        )


class SmtpEmailAdapter(EmailPort):
    def __init__(self, settings: SmtpSettings):
        self.settings = settings

    def _build(self, to, subject, body, html_body) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.from_email or "no-reply@localhost"
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message = self._build(to, subject, body, html_body)
        try:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.settings.timeout) as smtp:
                if self.settings.use_tls:
                    smtp.starttls()
                if self.settings.user:
                    smtp.login(self.settings.user, self.settings.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP delivery failed", to=to, subject=subject, error=str(exc))
            return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": message["Message-ID"], "status": "sent"}
