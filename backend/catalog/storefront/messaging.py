"""WhatsApp order hand-off for the storefront "Buy" button."""
import logging
import webbrowser
from collections.abc import Callable
from urllib.parse import quote

from catalog.core.config import settings
from catalog.storefront.variant_selection import (
    SIZE_NOT_APPLICABLE, OrderSummary, VariantSelection,
)

logger = logging.getLogger(__name__)

WHATSAPP_BASE_URL = "https://wa.me"
_RULE = "━" * 20


def format_price(price: float) -> str:
    return str(int(price)) if float(price).is_integer() else f"{price:.2f}"


def _size_line(size: str) -> str:
    if size == SIZE_NOT_APPLICABLE:
        return f"• Size: {size}"
    return f"• Size: *{size}*"


def format_order_message(order: OrderSummary) -> str:
    lines = [
        "🛒 *NEW ORDER REQUEST*",
        _RULE,
        "",
        "📦 *PRODUCT DETAILS*",
        f"• Product: *{order.product_name}*",
    ]
    if order.brand:
        lines.append(f"• Brand: {order.brand}")
    lines += [
        f"• Category: {order.category}",
        f"• Color: {order.color_name}",
        _size_line(order.size),
        f"• Price: *₹{format_price(order.price)}*",
        "",
        "📸 *Selected Image:*",
        order.image_url,
        "",
        _RULE,
        "💬 Please confirm availability and proceed with the order.",
    ]
    return "\n".join(lines)


def whatsapp_url(number: str, message: str) -> str:
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(message, safe='')}"


class WhatsAppChannel:
    """Opens a wa.me link carrying the message. No response is awaited."""

    def __init__(
        self,
        number: str | None = None,
        opener: Callable[[str], object] | None = None,
    ):
        self.number = number or settings.whatsapp_number
        self._open = opener or webbrowser.open

    def send(self, message: str) -> str:
        url = whatsapp_url(self.number, message)
        self._open(url)
        return url


def place_order(selection: VariantSelection, channel: WhatsAppChannel) -> str:
    """Compose the order for the current selection and hand it to ``channel``.

    Raises SizeRequiredError before anything is sent when a size is needed.
    """
    order = selection.compose_order()
    url = channel.send(format_order_message(order))
    logger.info("Order message opened for %s", order.product_name)
    return url
