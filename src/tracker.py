import logging
import sqlite3

from config import MAX_TRACKED_ITEMS
from repository import delete_item_data, timestamp


class TrackingError(Exception):
    """Base class for declined tracking operations."""

    def __init__(self, workspace_id: str, item_key: str) -> None:
        super().__init__(f"{item_key} ({workspace_id})")
        self.workspace_id = workspace_id
        self.item_key = item_key


class AlreadyTracked(TrackingError):
    pass


class NotTracked(TrackingError):
    pass


class QuotaExceeded(TrackingError):
    pass


def is_tracked(cursor: sqlite3.Cursor, workspace_id: str, item_key: str) -> bool:
    cursor.execute(
        "SELECT COUNT(*) FROM tracked_items WHERE workspace_id = ? AND item_key = ?",
        (workspace_id, item_key),
    )
    return cursor.fetchone()[0] > 0


def is_tracked_by_any(cursor: sqlite3.Cursor, item_key: str) -> bool:
    cursor.execute(
        "SELECT COUNT(*) FROM tracked_items WHERE item_key = ?",
        (item_key,),
    )
    return cursor.fetchone()[0] > 0


def count_tracked(cursor: sqlite3.Cursor, workspace_id: str) -> int:
    cursor.execute(
        "SELECT COUNT(*) FROM tracked_items WHERE workspace_id = ?",
        (workspace_id,),
    )
    return cursor.fetchone()[0]


def list_tracked(cursor: sqlite3.Cursor, workspace_id: str) -> list[str]:
    """Return item keys tracked by a workspace, oldest first."""
    cursor.execute(
        """
        SELECT item_key FROM tracked_items
        WHERE workspace_id = ?
        ORDER BY added_at, rowid
        """,
        (workspace_id,),
    )
    return [row[0] for row in cursor.fetchall()]


def list_all_tracked(cursor: sqlite3.Cursor) -> list[str]:
    """Return every item key tracked by at least one workspace."""
    cursor.execute(
        """
        SELECT item_key FROM tracked_items
        GROUP BY item_key
        ORDER BY MIN(rowid)
        """
    )
    return [row[0] for row in cursor.fetchall()]


def track(conn: sqlite3.Connection, workspace_id: str, item_key: str) -> None:
    """Start tracking an item for a workspace.

    Raises AlreadyTracked if the workspace already tracks the item and
    QuotaExceeded if it already holds MAX_TRACKED_ITEMS items. Nothing is
    written in either case.
    """
    cursor = conn.cursor()

    if is_tracked(cursor, workspace_id, item_key):
        raise AlreadyTracked(workspace_id, item_key)

    if count_tracked(cursor, workspace_id) >= MAX_TRACKED_ITEMS:
        logging.warning(
            f"Workspace {workspace_id} is at its quota of {MAX_TRACKED_ITEMS} items"
        )
        raise QuotaExceeded(workspace_id, item_key)

    with conn:
        cursor.execute(
            """
            INSERT INTO tracked_items (workspace_id, item_key, added_at)
            VALUES (?,?,?)
            """,
            (workspace_id, item_key, timestamp()),
        )

    logging.info(f"Workspace {workspace_id} now tracking '{item_key}'")


def untrack(conn: sqlite3.Connection, workspace_id: str, item_key: str) -> bool:
    """Stop tracking an item for a workspace.

    When no workspace tracks the item anymore its listings, average prices and
    best deals are purged. Returns True if that purge happened.
    """
    cursor = conn.cursor()

    if not is_tracked(cursor, workspace_id, item_key):
        raise NotTracked(workspace_id, item_key)

    # The pair removal and the purge commit or roll back together
    purged = False
    with conn:
        cursor.execute(
            "DELETE FROM tracked_items WHERE workspace_id = ? AND item_key = ?",
            (workspace_id, item_key),
        )
        if not is_tracked_by_any(cursor, item_key):
            delete_item_data(cursor, item_key)
            purged = True

    logging.info(f"Workspace {workspace_id} stopped tracking '{item_key}'")

    return purged
