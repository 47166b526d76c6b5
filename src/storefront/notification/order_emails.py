"""Emails the customer about their order.

Reacts to OrderPlaced and OrderStatusChanged. Sending is fire-and-forget:
a failed or raising channel is logged and never fails the order flow.
"""

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification import templates
from storefront.notification.channel import get_email_channel
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def send_order_email(event_name: str, to, context: dict) -> dict | None:
    if not to:
        logger.info("No email address on order, skipping notification", order_id=context.get("order_id"))
        return None

    try:
        content = templates.render(event_name, context)
        result = get_email_channel().send(to=to, subject=content["subject"], body=content["body"])
    except Exception as exc:
        logger.error(
            "Order email raised",
            trigger=event_name,
            order_id=context.get("order_id"),
            error=str(exc),
        )
        return None

    if result.get("status") != "sent":
        logger.warning(
            "Order email not delivered",
            trigger=event_name,
            order_id=context.get("order_id"),
            error=result.get("error"),
        )
    return result


@storefront.event_handler(part_of=Order)
class OrderEmailNotifier:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        send_order_email("OrderPlaced", event.customer_email, event.to_dict())

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        send_order_email("OrderStatusChanged", event.customer_email, event.to_dict())
