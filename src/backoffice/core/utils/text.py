"""Text processing utilities."""

import re
import secrets

from backoffice.core.constants import MAX_SLUG_LENGTH, ORDER_NUMBER_PREFIX


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a product or category name.

    Examples:
        >>> generate_slug("Blue Cotton T-Shirt")
        'blue-cotton-t-shirt'
        >>> generate_slug("Mug (350ml) & Saucer!")
        'mug-350ml-saucer'
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s_]+", "-", slug)
    return slug.strip("-")[:max_length]


def generate_order_number(prefix: str = ORDER_NUMBER_PREFIX) -> str:
    """Generate a human-facing order number such as ``ORD-1A2B3C4D5E6F``.

    Drafts pass ``DRAFT_NUMBER_PREFIX`` and get ``DFT-...`` numbers instead.
    """
    return f"{prefix}{secrets.token_hex(6).upper()}"
