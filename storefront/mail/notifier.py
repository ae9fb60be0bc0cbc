"""
Order notifications.

The order engine only sees the ``Notifier`` protocol. ``MailNotifier``
renders short plain-text bodies with jinja2 and hands them to the
MailService.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jinja2 import DictLoader, Environment, StrictUndefined

from .message import EmailMessage
from .service import MailService

if TYPE_CHECKING:
    from ..orders.models import Order
    from ..users import User


_TEMPLATES = {
    "order_confirmation.txt": (
        "Hello {{ user.full_name or user.email }},\n"
        "\n"
        "Thank you for your order!\n"
        "\n"
        "Order Number: {{ order.id }}\n"
        "Total Amount: {{ order.total_price | money }}\n"
        "\n"
        "Order Items:\n"
        "{% for item in order.order_items %}"
        "  - {{ item.name }} - Quantity: {{ item.quantity }} - {{ item.subtotal | money }}\n"
        "{% endfor %}"
        "\n"
        "Shipping Address:\n"
        "  {{ order.shipping_address.street }}\n"
        "  {{ order.shipping_address.city }}, {{ order.shipping_address.state }} "
        "{{ order.shipping_address.postal_code }}\n"
        "  {{ order.shipping_address.country }}\n"
    ),
    "order_status.txt": (
        "Hello {{ user.full_name or user.email }},\n"
        "\n"
        "Your order {{ order.id }} is now {{ order.order_status.value }}.\n"
        "{% if order.is_paid %}Payment received: {{ order.paid_at.strftime('%Y-%m-%d %H:%M UTC') }}\n{% endif %}"
        "{% if order.is_delivered %}Delivered: {{ order.delivered_at.strftime('%Y-%m-%d %H:%M UTC') }}\n{% endif %}"
        "{% if order.canceled_at %}Canceled: {{ order.canceled_at.strftime('%Y-%m-%d %H:%M UTC') }}\n{% endif %}"
    ),
    "refund_confirmation.txt": (
        "Hello {{ user.full_name or user.email }},\n"
        "\n"
        "Your refund for order {{ order.id }} has been processed.\n"
        "\n"
        "Refund Amount: {{ order.total_price | money }}\n"
        "Refund Reference: {{ order.refund_result.id }}\n"
    ),
}


def _money(value: Any) -> str:
    return f"${Decimal(str(value)).quantize(Decimal('0.01'))}"


@runtime_checkable
class Notifier(Protocol):
    """Transactional notifications sent by the order engine."""

    async def send_order_confirmation(self, order: Order, user: User) -> None:
        ...

    async def send_order_status_update(self, order: Order, user: User) -> None:
        ...

    async def send_refund_confirmation(self, order: Order, user: User) -> None:
        ...


class MailNotifier:
    """
    Notifier that sends email through a MailService.

    Send failures surface as MailFault; the order engine decides whether
    they matter.
    """

    def __init__(self, mail: MailService):
        self.mail = mail
        self.env = Environment(
            loader=DictLoader(_TEMPLATES),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.env.filters["money"] = _money

    def render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context)

    async def _send(self, user: User, subject: str, template_name: str, order: Order) -> None:
        body = self.render(template_name, order=order, user=user)
        await self.mail.send_message(EmailMessage(subject=subject, body=body, to=[user.email]))

    async def send_order_confirmation(self, order: Order, user: User) -> None:
        await self._send(user, f"Order Confirmation - Order #{order.id}", "order_confirmation.txt", order)

    async def send_order_status_update(self, order: Order, user: User) -> None:
        await self._send(
            user,
            f"Order Update - Order #{order.id}: {order.order_status.value}",
            "order_status.txt",
            order,
        )

    async def send_refund_confirmation(self, order: Order, user: User) -> None:
        await self._send(user, f"Refund Confirmation - Order #{order.id}", "refund_confirmation.txt", order)
