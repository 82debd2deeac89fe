"""
Store-related email templates and the checkout notifier.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from libs.common.currency import format_amount
from libs.common.emails.core import send_email
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class OrderSummaryItem:
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass
class OrderSummary:
    """The slice of a persisted order that the confirmation email renders."""

    order_id: str
    order_number: str
    total_amount: Decimal
    items: list[OrderSummaryItem] = field(default_factory=list)
    shipping_address: Optional[dict] = None


def _format_address(address: Optional[dict]) -> Optional[str]:
    if not address:
        return None
    parts = [
        address.get("street"),
        address.get("city"),
        address.get("state"),
        address.get("zip_code"),
        address.get("country"),
    ]
    return ", ".join(p for p in parts if p)


async def send_order_confirmation_email(
    to_email: str,
    first_name: str,
    summary: OrderSummary,
) -> bool:
    """
    Send the order confirmation email right after checkout.
    """
    subject = f"Order Confirmation - Order #{summary.order_number}"
    address = _format_address(summary.shipping_address)

    items_text = "\n".join(
        f"  - {item.product_name} x{item.quantity} - {format_amount(item.subtotal)}"
        for item in summary.items
    )
    items_html = "".join(
        f"<tr><td>{item.product_name}</td>"
        f"<td style='text-align:center'>{item.quantity}</td>"
        f"<td style='text-align:right'>{format_amount(item.unit_price)}</td>"
        f"<td style='text-align:right'>{format_amount(item.subtotal)}</td></tr>"
        for item in summary.items
    )

    body = f"""Hi {first_name},

Thank you for your order! We've received it and will start processing it as soon as payment is confirmed.

Order #{summary.order_number}

Items:
{items_text}

Total: {format_amount(summary.total_amount)}
{f"Shipping to: {address}" if address else ""}

Thank you for shopping with BeBrand!

— The BeBrand Team
"""

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #111827; color: white; padding: 30px; border-radius: 12px 12px 0 0; }}
        .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 12px 12px; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ padding: 10px; text-align: left; border-bottom: 1px solid #e5e7eb; }}
        .total-row {{ font-weight: bold; font-size: 18px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0;">Thank you for your order!</h1>
            <p style="margin: 10px 0 0 0; opacity: 0.9;">Order #{summary.order_number}</p>
        </div>
        <div class="content">
            <p>Hi {first_name},</p>
            <p>We've received your order and will start processing it as soon as payment is confirmed.</p>
            <table>
                <thead>
                    <tr><th>Item</th><th style="text-align:center">Qty</th><th style="text-align:right">Price</th><th style="text-align:right">Subtotal</th></tr>
                </thead>
                <tbody>
                    {items_html}
                </tbody>
            </table>
            <p class="total-row">Total: {format_amount(summary.total_amount)}</p>
            {f"<p><strong>Shipping to:</strong> {address}</p>" if address else ""}
            <p>— The BeBrand Team</p>
        </div>
    </div>
</body>
</html>
"""

    return await send_email(to_email, subject, body, html_body, to_name=first_name)


class OrderNotifier:
    """
    Fire-and-forget confirmation sender used by checkout.

    Never raises: a failed send is logged and swallowed so the order that
    triggered it stays committed.
    """

    async def send_order_confirmation(
        self, email: str, first_name: Optional[str], summary: OrderSummary
    ) -> None:
        try:
            sent = await send_order_confirmation_email(
                to_email=email,
                first_name=first_name or "Customer",
                summary=summary,
            )
        except Exception:
            logger.exception(
                "Failed to send order confirmation for %s", summary.order_number
            )
            return
        if not sent:
            logger.warning(
                "Order confirmation for %s was not delivered to %s",
                summary.order_number,
                email,
            )


_order_notifier: Optional[OrderNotifier] = None


def get_order_notifier() -> OrderNotifier:
    """Get or create the singleton OrderNotifier (FastAPI dependency)."""
    global _order_notifier
    if _order_notifier is None:
        _order_notifier = OrderNotifier()
    return _order_notifier
