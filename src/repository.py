import datetime
import logging
import sqlite3
from decimal import Decimal
from pathlib import Path
from typing import TypedDict


class StoredDeal(TypedDict):
    title: str
    price: float
    url: str
    scraped_at: str


class AverageSnapshot(TypedDict):
    average_price: float
    calculated_at: str


def init_database(database: Path | str) -> sqlite3.Connection:
    """Open the database and create the tracking and history tables."""
    if database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(database)
    cursor = conn.cursor()

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS tracked_items (
            workspace_id TEXT NOT NULL,
            item_key TEXT NOT NULL,
            added_at TEXT NOT NULL,
            UNIQUE (workspace_id, item_key)
        )
        """
    )
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS listings (
            item_key TEXT NOT NULL,
            title TEXT,
            price REAL NOT NULL,
            url TEXT,
            scraped_at TEXT NOT NULL
        )
        """
    )
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS average_prices (
            item_key TEXT NOT NULL,
            average_price REAL NOT NULL,
            calculated_at TEXT NOT NULL
        )
        """
    )
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS best_deals (
            item_key TEXT NOT NULL,
            title TEXT,
            price REAL NOT NULL,
            url TEXT,
            scraped_at TEXT NOT NULL
        )
        """
    )

    # Create indexes for per-item lookups and purges
    for table in ("tracked_items", "listings", "average_prices", "best_deals"):
        cursor.execute(
            f"CREATE INDEX IF NOT EXISTS idx_{table}_item ON {table}(item_key)"
        )

    conn.commit()

    return conn


def timestamp() -> str:
    """Current UTC time in sortable ISO-8601 form."""
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


def insert_listing(
    cursor: sqlite3.Cursor, item_key: str, title: str, price: Decimal, url: str
) -> None:
    cursor.execute(
        """
        INSERT INTO listings (item_key, title, price, url, scraped_at)
        VALUES (?,?,?,?,?)
        """,
        (item_key, title, float(price), url, timestamp()),
    )


def insert_average_price(
    cursor: sqlite3.Cursor, item_key: str, average_price: Decimal
) -> None:
    cursor.execute(
        """
        INSERT INTO average_prices (item_key, average_price, calculated_at)
        VALUES (?,?,?)
        """,
        (item_key, float(average_price), timestamp()),
    )


def insert_best_deal(
    cursor: sqlite3.Cursor, item_key: str, title: str, price: Decimal, url: str
) -> None:
    cursor.execute(
        """
        INSERT INTO best_deals (item_key, title, price, url, scraped_at)
        VALUES (?,?,?,?,?)
        """,
        (item_key, title, float(price), url, timestamp()),
    )


def delete_item_data(cursor: sqlite3.Cursor, item_key: str) -> None:
    """Purge listings, average prices and best deals for an item."""
    for table in ("listings", "average_prices", "best_deals"):
        cursor.execute(f"DELETE FROM {table} WHERE item_key = ?", (item_key,))
    logging.info(f"Purged history for '{item_key}'")


def get_best_deals(cursor: sqlite3.Cursor, item_key: str) -> list[StoredDeal]:
    """Return every stored best deal for an item, cheapest first."""
    cursor.execute(
        """
        SELECT title, price, url, scraped_at
        FROM best_deals
        WHERE item_key = ?
        ORDER BY price ASC, rowid ASC
        """,
        (item_key,),
    )
    return [
        {"title": title, "price": price, "url": url, "scraped_at": scraped_at}
        for title, price, url, scraped_at in cursor.fetchall()
    ]


def get_latest_average(
    cursor: sqlite3.Cursor, item_key: str
) -> AverageSnapshot | None:
    """Return the most recent average price snapshot for an item."""
    cursor.execute(
        """
        SELECT average_price, calculated_at
        FROM average_prices
        WHERE item_key = ?
        ORDER BY calculated_at DESC, rowid DESC
        LIMIT 1
        """,
        (item_key,),
    )
    row = cursor.fetchone()
    if row is None:
        return None
    return {"average_price": row[0], "calculated_at": row[1]}


def count_listings(cursor: sqlite3.Cursor, item_key: str) -> int:
    cursor.execute("SELECT COUNT(*) FROM listings WHERE item_key = ?", (item_key,))
    return cursor.fetchone()[0]
