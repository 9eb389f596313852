import logging
from decimal import Decimal
from typing import NamedTuple

from config import DEAL_COUNT, IQR_MULTIPLIER, MARKETPLACE_URL, PRICE_FLOOR
from normalizer import absolute_url


class Listing(NamedTuple):
    title: str
    price: Decimal
    url: str


class Analysis(NamedTuple):
    q1: Decimal
    q3: Decimal
    lower_limit: Decimal
    upper_limit: Decimal
    valid: list[Listing]
    average: Decimal | None
    best_deals: list[Listing]


def calculate_quartiles(prices: list[Decimal]) -> tuple[Decimal, Decimal]:
    """Return index-based Q1 and Q3 of a non-empty price list."""
    sorted_prices = sorted(prices)
    n = len(sorted_prices)
    return sorted_prices[n // 4], sorted_prices[3 * n // 4]


def calculate_limits(q1: Decimal, q3: Decimal) -> tuple[Decimal, Decimal]:
    """Return the lower and upper limits of the acceptance band."""
    iqr = q3 - q1
    multiplier = Decimal(str(IQR_MULTIPLIER))
    return q1 - multiplier * iqr, q3 + multiplier * iqr


def filter_valid(
    listings: list[Listing], lower_limit: Decimal, upper_limit: Decimal
) -> list[Listing]:
    """Keep listings priced inside the acceptance band."""
    return [
        listing for listing in listings if lower_limit <= listing.price <= upper_limit
    ]


def calculate_average(listings: list[Listing]) -> Decimal | None:
    """Mean price of the given listings, None if there are none."""
    if not listings:
        return None
    return sum((listing.price for listing in listings), Decimal(0)) / len(listings)


def select_best_deals(
    listings: list[Listing],
    valid: list[Listing],
    q1: Decimal,
    base_url: str = MARKETPLACE_URL,
) -> list[Listing]:
    """Cheapest listings below Q1 followed by the cheapest market-rate listings.

    The low set is drawn from every listing, the market-rate set from the valid
    ones only, so a listing may show up in both halves.
    """
    below_q1 = sorted(
        (listing for listing in listings if listing.price < q1),
        key=lambda listing: listing.price,
    )
    market_rate = sorted(valid, key=lambda listing: listing.price)

    deals = below_q1[:DEAL_COUNT] + market_rate[:DEAL_COUNT]
    return [
        listing._replace(url=absolute_url(listing.url, base_url)) for listing in deals
    ]


def analyze(
    listings: list[Listing], base_url: str = MARKETPLACE_URL
) -> Analysis | None:
    """Split listings into market-rate and outliers and pick the best deals."""
    priced = [listing for listing in listings if listing.price > PRICE_FLOOR]
    if not priced:
        return None

    q1, q3 = calculate_quartiles([listing.price for listing in priced])
    lower_limit, upper_limit = calculate_limits(q1, q3)
    valid = filter_valid(priced, lower_limit, upper_limit)

    logging.info(
        f"IQR band {lower_limit}..{upper_limit}: {len(valid)} of {len(priced)} listings valid"
    )

    return Analysis(
        q1=q1,
        q3=q3,
        lower_limit=lower_limit,
        upper_limit=upper_limit,
        valid=valid,
        average=calculate_average(valid),
        best_deals=select_best_deals(priced, valid, q1, base_url),
    )
