"""Order status update email, sent on every status transition."""

_HEADLINES = {
    "processing": "is being prepared",
    "shipped": "is on its way",
    "delivered": "has been delivered",
    "cancelled": "has been cancelled",
}


class StatusUpdateTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        status = context.get("new_status", "updated")
        headline = _HEADLINES.get(status, f"is now {status}")
        body = f"Your order #{order_id} {headline}."
        if context.get("note"):
            body += f"\n\nNote: {context['note']}"
        return {
            "subject": f"Order #{order_id} {status.capitalize()}",
            "body": body,
        }
