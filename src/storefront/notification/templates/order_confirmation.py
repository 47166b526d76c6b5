"""Order confirmation email, sent when an order is placed."""

import json


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        items = context.get("items") or []
        if isinstance(items, str):
            items = json.loads(items)

        lines = "\n".join(
            f"  {item['quantity']} x {item['name']} @ {float(item['unit_price']):.2f}" for item in items
        )
        return {
            "subject": f"Order #{order_id} Confirmed",
            "body": (
                f"Thank you for your order #{order_id}.\n\n"
                f"{lines}\n\n"
                f"Items:    {float(context.get('items_price', 0)):.2f}\n"
                f"Tax:      {float(context.get('tax_price', 0)):.2f}\n"
                f"Shipping: {float(context.get('shipping_price', 0)):.2f}\n"
                f"Total:    {float(context.get('total_price', 0)):.2f}\n\n"
                "We'll let you know when it ships."
            ),
        }
