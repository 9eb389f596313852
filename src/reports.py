import datetime
import sqlite3
from typing import TypedDict

from repository import (
    AverageSnapshot,
    StoredDeal,
    count_listings,
    get_best_deals,
    get_latest_average,
)
from results import ScrapeOutcome
from tracker import is_tracked
from tracker import list_tracked as list_tracked_items


class Stats(TypedDict):
    item_key: str
    tracked: bool
    latest: AverageSnapshot | None
    listing_count: int


def best_deals(cursor: sqlite3.Cursor, item_key: str) -> list[StoredDeal]:
    """Return the accumulated best deals for an item, cheapest first."""
    return get_best_deals(cursor, item_key)


def stats(cursor: sqlite3.Cursor, item_key: str, workspace_id: str) -> Stats:
    """Return the latest market average for an item.

    Whether the workspace tracks the item is reported alongside but does not
    block the lookup.
    """
    return {
        "item_key": item_key,
        "tracked": is_tracked(cursor, workspace_id, item_key),
        "latest": get_latest_average(cursor, item_key),
        "listing_count": count_listings(cursor, item_key),
    }


def list_tracked(cursor: sqlite3.Cursor, workspace_id: str) -> list[str]:
    return list_tracked_items(cursor, workspace_id)


def format_timestamp(value: str) -> str:
    dt = datetime.datetime.fromisoformat(value)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_deals(item_key: str, deals: list[StoredDeal]) -> str:
    if not deals:
        return f"⚠️ No deals found for `{item_key}`."

    lines = [
        f"• **{deal['title']}** - ${deal['price']:.2f} [Link]({deal['url']})"
        for deal in deals
    ]
    return f"🔥 **Best deals for '{item_key}':**\n" + "\n".join(lines)


def format_stats(report: Stats) -> str:
    lines = []
    if not report["tracked"]:
        lines.append("❗ This item is not being tracked.")

    latest = report["latest"]
    if latest is None:
        lines.append("⚠️ No price history found for this item.")
        return "\n".join(lines)

    lines.append(
        f"📊 Stats for **{report['item_key']}**:\n"
        f"- Latest average price: **${latest['average_price']:.2f}**\n"
        f"- Listings recorded: {report['listing_count']}\n"
        f"- Last updated: {format_timestamp(latest['calculated_at'])}"
    )
    return "\n".join(lines)


def format_tracked(item_keys: list[str]) -> str:
    if not item_keys:
        return "⚠️ No items are currently tracked in this server."
    return "📋 **Tracked items in this server:**\n• " + "\n• ".join(item_keys)


def format_outcome(outcome: ScrapeOutcome) -> str:
    if not outcome.success:
        return f"❌ Error scraping `{outcome.item_key}`: {outcome.error}"

    result = outcome.result
    if result is None or result.candidates == 0:
        return f"✅ Finished scraping for `{outcome.item_key}` (no priced listings)."
    return (
        f"✅ Finished scraping for `{outcome.item_key}`: "
        f"{result.saved_listings} of {result.candidates} listings at market rate, "
        f"average ${result.average:.2f}."
    )


def format_outcomes(outcomes: list[ScrapeOutcome]) -> str:
    lines = [format_outcome(outcome) for outcome in outcomes]
    lines.append("🎉 Scraping completed for all tracked items!")
    return "\n".join(lines)
