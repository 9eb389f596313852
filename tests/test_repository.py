"""Tests for the listing repository."""

import datetime
import sqlite3
from decimal import Decimal
from pathlib import Path

from repository import (
    count_listings,
    delete_item_data,
    get_best_deals,
    get_latest_average,
    init_database,
    insert_average_price,
    insert_best_deal,
    insert_listing,
    timestamp,
)


def table_count(cursor: sqlite3.Cursor, table: str, item_key: str) -> int:
    cursor.execute(f"SELECT COUNT(*) FROM {table} WHERE item_key = ?", (item_key,))
    return cursor.fetchone()[0]


class TestInitDatabase:
    def test_creates_tables(self, cursor: sqlite3.Cursor) -> None:
        cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in cursor.fetchall()}
        assert {"tracked_items", "listings", "average_prices", "best_deals"} <= tables

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        database = tmp_path / "nested" / "deal_scout.db"
        conn = init_database(database)
        conn.close()
        assert database.exists()

    def test_is_idempotent(self, tmp_path: Path) -> None:
        database = tmp_path / "deal_scout.db"
        init_database(database).close()
        init_database(database).close()


class TestTimestamp:
    def test_is_sortable_iso_format(self) -> None:
        value = timestamp()
        parsed = datetime.datetime.fromisoformat(value)
        assert parsed.tzinfo is not None
        assert parsed.microsecond == 0


class TestBestDeals:
    def test_ordered_by_price_across_runs(self, cursor: sqlite3.Cursor) -> None:
        insert_best_deal(cursor, "bike", "Blue bike", Decimal("80"), "https://x/1")
        insert_best_deal(cursor, "bike", "Red bike", Decimal("40"), "https://x/2")
        insert_best_deal(cursor, "bike", "Red bike", Decimal("40"), "https://x/2")
        insert_best_deal(cursor, "desk", "Desk", Decimal("10"), "https://x/3")

        deals = get_best_deals(cursor, "bike")

        assert [d["price"] for d in deals] == [40.0, 40.0, 80.0]
        assert deals[0]["title"] == "Red bike"
        assert deals[0]["url"] == "https://x/2"

    def test_empty_for_unknown_item(self, cursor: sqlite3.Cursor) -> None:
        assert get_best_deals(cursor, "nothing") == []


class TestLatestAverage:
    def test_returns_most_recent(self, cursor: sqlite3.Cursor) -> None:
        cursor.executemany(
            "INSERT INTO average_prices VALUES (?,?,?)",
            [
                ("bike", 100.0, "2026-01-02T00:00:00+00:00"),
                ("bike", 90.0, "2026-01-03T00:00:00+00:00"),
                ("bike", 120.0, "2026-01-01T00:00:00+00:00"),
            ],
        )

        latest = get_latest_average(cursor, "bike")

        assert latest == {
            "average_price": 90.0,
            "calculated_at": "2026-01-03T00:00:00+00:00",
        }

    def test_same_second_prefers_last_insert(self, cursor: sqlite3.Cursor) -> None:
        insert_average_price(cursor, "bike", Decimal("100"))
        insert_average_price(cursor, "bike", Decimal("110"))
        cursor.execute("UPDATE average_prices SET calculated_at = '2026-01-01T00:00:00+00:00'")

        latest = get_latest_average(cursor, "bike")

        assert latest is not None
        assert latest["average_price"] == 110.0

    def test_none_without_history(self, cursor: sqlite3.Cursor) -> None:
        assert get_latest_average(cursor, "bike") is None


class TestDeleteItemData:
    def test_purges_only_the_given_item(self, cursor: sqlite3.Cursor) -> None:
        for item_key in ("bike", "desk"):
            insert_listing(cursor, item_key, "t", Decimal("10"), "/item/1")
            insert_average_price(cursor, item_key, Decimal("10"))
            insert_best_deal(cursor, item_key, "t", Decimal("10"), "https://x/1")

        delete_item_data(cursor, "bike")

        for table in ("listings", "average_prices", "best_deals"):
            assert table_count(cursor, table, "bike") == 0
            assert table_count(cursor, table, "desk") == 1

    def test_count_listings(self, cursor: sqlite3.Cursor) -> None:
        insert_listing(cursor, "bike", "a", Decimal("10"), "/item/1")
        insert_listing(cursor, "bike", "b", Decimal("12"), "/item/2")
        assert count_listings(cursor, "bike") == 2
        assert count_listings(cursor, "desk") == 0
