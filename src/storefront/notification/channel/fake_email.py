"""In-memory email adapter, the default outside production."""

from uuid import uuid4

from storefront.notification.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    """Keeps every message in ``outbox`` instead of sending it."""

    def __init__(self):
        self.outbox: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"email-{uuid4().hex[:12]}"
        self.outbox.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, address: str) -> list[dict]:
        return [message for message in self.outbox if message["to"] == address]

    def reset(self):
        self.outbox.clear()
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
