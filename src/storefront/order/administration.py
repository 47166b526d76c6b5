"""Admin order transitions: commands and handler.

Access control happens at the API boundary; these commands assume the
caller has already been checked as an admin.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    payment_status = String(max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=255)


@storefront.command(part_of="Order")
class MarkOrderDelivered:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = Text()


@storefront.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(MarkOrderPaid)
    def mark_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_paid(
            payment_id=command.payment_id,
            payment_status=command.payment_status,
            update_time=command.update_time,
            email_address=command.email_address,
        )
        repo.add(order)

    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered()
        repo.add(order)

    @handle(SetOrderStatus)
    def set_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_status(command.status, note=command.note)
        repo.add(order)
