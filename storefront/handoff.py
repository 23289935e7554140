import re
import webbrowser
from typing import Callable, Optional
from urllib.parse import quote

from storefront.core.config import settings
from storefront.core.logger import get_logger
from storefront.core.models import Product, SiteSettings

logger = get_logger(__name__)

MESSAGING_HOST = "wa.me"
CURRENCY_LABEL = "Rs."


def build_order_message(product: Product) -> str:
    """Render the prefilled order message for a product.

    The name, the price and the image URL (when the product has one) each
    sit on their own line, in that order.
    """
    lines = [
        "Hi! I want to order:",
        "",
        f"*{product.name}*",
        f"Price: {CURRENCY_LABEL} {product.price_label}",
    ]
    if product.image_url:
        lines += ["", f"Image: {product.image_url}"]
    return "\n".join(lines)


def normalize_number(value: str) -> str:
    """Strip everything but digits, e.g. '+92 331-0076524' -> '923310076524'."""
    return re.sub(r"\D", "", value or "")


def resolve_destination(site_settings: Optional[SiteSettings]) -> str:
    if site_settings is not None:
        number = normalize_number(site_settings.whatsapp_number)
        if number:
            return number
    return normalize_number(settings.DEFAULT_WHATSAPP_NUMBER)


def build_deep_link(message: str, destination_number: str) -> str:
    number = normalize_number(destination_number)
    return f"https://{MESSAGING_HOST}/{number}?text={quote(message, safe='')}"


def dispatch(
    message: str,
    destination_number: str,
    opener: Callable[[str], object] = webbrowser.open_new_tab,
) -> str:
    """Open the messaging deep link in a new browsing context.

    Fire-and-forget: whatever the opener returns is ignored.

    Returns:
        str: The link that was opened.
    """
    url = build_deep_link(message, destination_number)
    logger.info("Opening order link for %s", normalize_number(destination_number))
    opener(url)
    return url
