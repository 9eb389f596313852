import re
from decimal import Decimal, InvalidOperation
from urllib.parse import quote, urljoin

from config import MARKETPLACE_URL, SEARCH_PATH

PRICE_PATTERN = re.compile(r"\$\s?([\d,]+(?:\.\d{2})?)")


def normalize_item_key(text: str) -> str:
    """Convert free text to the canonical item key."""
    return text.strip().lower()


def extract_price(label: str | None) -> Decimal:
    """Extract the first dollar amount in a label, or zero if there is none."""
    if not label:
        return Decimal(0)

    match = PRICE_PATTERN.search(label)
    if not match:
        return Decimal(0)

    # Strip thousands separators
    cleaned = match.group(1).replace(",", "")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0)


def slugify_search_term(item_key: str) -> str:
    """Collapse whitespace runs into single dashes."""
    return re.sub(r"\s+", "-", item_key)


def build_search_url(item_key: str, base_url: str = MARKETPLACE_URL) -> str:
    """Return the marketplace search URL for an item key."""
    return f"{base_url}{SEARCH_PATH}{quote(slugify_search_term(item_key), safe='')}"


def absolute_url(href: str, base_url: str = MARKETPLACE_URL) -> str:
    """Render a listing link as an absolute URL."""
    return urljoin(base_url, href)
