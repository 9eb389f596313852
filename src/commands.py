import logging
import sqlite3
from typing import NamedTuple

from config import COMMAND_PREFIX, MAX_TRACKED_ITEMS
from normalizer import normalize_item_key
from reports import (
    best_deals,
    format_deals,
    format_outcomes,
    format_stats,
    format_tracked,
    list_tracked,
    stats,
)
from scraper import Fetcher, fetch_result_page, scrape_items
from tracker import AlreadyTracked, NotTracked, QuotaExceeded, track, untrack


class CommandResult(NamedTuple):
    success: bool
    message: str


def track_command(
    conn: sqlite3.Connection, workspace_id: str, text: str
) -> CommandResult:
    item_key = normalize_item_key(text)
    try:
        track(conn, workspace_id, item_key)
    except AlreadyTracked:
        return CommandResult(
            False, f"⚠️ `{item_key}` is already being tracked in this server."
        )
    except QuotaExceeded:
        return CommandResult(
            False,
            f"❗ This server is already tracking {MAX_TRACKED_ITEMS} items. "
            f"Use `{COMMAND_PREFIX}untrack` to remove one.",
        )
    return CommandResult(True, f"✅ Now tracking `{item_key}` for this server!")


def untrack_command(
    conn: sqlite3.Connection, workspace_id: str, text: str
) -> CommandResult:
    item_key = normalize_item_key(text)
    try:
        untrack(conn, workspace_id, item_key)
    except NotTracked:
        return CommandResult(
            False, f"⚠️ `{item_key}` is not currently being tracked in this server."
        )
    return CommandResult(True, f"✅ `{item_key}` has been removed from tracking.")


def scrape_command(
    conn: sqlite3.Connection,
    workspace_id: str,
    fetch: Fetcher = fetch_result_page,
) -> CommandResult:
    """Scrape every item tracked by the workspace, one after another."""
    item_keys = list_tracked(conn.cursor(), workspace_id)
    if not item_keys:
        return CommandResult(
            False,
            "⚠️ No items are currently tracked in this server. "
            f"Use `{COMMAND_PREFIX}track <item>` to add some.",
        )

    logging.info(f"Workspace {workspace_id} scraping {len(item_keys)} items")
    outcomes = scrape_items(conn, item_keys, fetch)

    header = (
        f"🔄 Starting scraping for {len(item_keys)} tracked item(s)... "
        "This may take a while."
    )
    return CommandResult(
        all(outcome.success for outcome in outcomes),
        f"{header}\n{format_outcomes(outcomes)}",
    )


def list_command(conn: sqlite3.Connection, workspace_id: str) -> CommandResult:
    return CommandResult(True, format_tracked(list_tracked(conn.cursor(), workspace_id)))


def deals_command(
    conn: sqlite3.Connection, workspace_id: str, text: str
) -> CommandResult:
    item_key = normalize_item_key(text)
    deals = best_deals(conn.cursor(), item_key)
    return CommandResult(bool(deals), format_deals(item_key, deals))


def stats_command(
    conn: sqlite3.Connection, workspace_id: str, text: str
) -> CommandResult:
    item_key = normalize_item_key(text)
    report = stats(conn.cursor(), item_key, workspace_id)
    return CommandResult(report["latest"] is not None, format_stats(report))


ITEM_COMMANDS = {
    "track": track_command,
    "untrack": untrack_command,
    "deals": deals_command,
    "stats": stats_command,
}

WORKSPACE_COMMANDS = {
    "scrape": scrape_command,
    "list": list_command,
}


def handle_message(
    conn: sqlite3.Connection, workspace_id: str, content: str
) -> CommandResult | None:
    """Run a prefixed chat command. Returns None for anything else."""
    content = content.strip()
    if not content.startswith(COMMAND_PREFIX):
        return None

    parts = content.split(maxsplit=1)
    command = parts[0][len(COMMAND_PREFIX) :]

    if command in WORKSPACE_COMMANDS:
        return WORKSPACE_COMMANDS[command](conn, workspace_id)

    if command in ITEM_COMMANDS:
        if len(parts) < 2:
            return CommandResult(
                False,
                f"❗ Please specify an item. Example: `{COMMAND_PREFIX}{command} green apple`",
            )
        return ITEM_COMMANDS[command](conn, workspace_id, parts[1])

    return None
