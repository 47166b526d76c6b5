"""Template registry: maps the triggering event name to its email template."""

from storefront.notification.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notification.templates.status_update import StatusUpdateTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    "OrderPlaced": OrderConfirmationTemplate,
    "OrderStatusChanged": StatusUpdateTemplate,
}


def render(event_name: str, context: dict) -> dict:
    return TEMPLATE_REGISTRY[event_name].render(context)
