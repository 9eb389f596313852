"""Tests for the query facade and message formatting."""

import os
import sqlite3
import subprocess
import sys
from decimal import Decimal
from pathlib import Path

from reports import (
    best_deals,
    format_deals,
    format_outcomes,
    format_stats,
    format_tracked,
    stats,
)
from repository import insert_average_price, insert_best_deal, insert_listing
from results import ScrapeOutcome, ScrapeResult
from tracker import track


class TestQueries:
    def test_best_deals(self, cursor: sqlite3.Cursor) -> None:
        insert_best_deal(cursor, "bike", "B", Decimal("30"), "https://x/b")
        insert_best_deal(cursor, "bike", "A", Decimal("20"), "https://x/a")

        assert [d["title"] for d in best_deals(cursor, "bike")] == ["A", "B"]

    def test_stats_reports_tracking_without_blocking(
        self, conn: sqlite3.Connection
    ) -> None:
        cursor = conn.cursor()
        insert_listing(cursor, "bike", "A", Decimal("20"), "/item/a")
        insert_average_price(cursor, "bike", Decimal("20"))

        report = stats(cursor, "bike", "guild-1")

        assert report["tracked"] is False
        assert report["latest"] is not None
        assert report["latest"]["average_price"] == 20.0
        assert report["listing_count"] == 1

    def test_stats_without_history(self, conn: sqlite3.Connection) -> None:
        track(conn, "guild-1", "bike")

        report = stats(conn.cursor(), "bike", "guild-1")

        assert report["tracked"] is True
        assert report["latest"] is None


class TestFormatting:
    def test_format_deals(self) -> None:
        message = format_deals(
            "bike",
            [
                {
                    "title": "Red bike",
                    "price": 40.0,
                    "url": "https://offerup.com/item/detail/1",
                    "scraped_at": "2026-01-01T00:00:00+00:00",
                }
            ],
        )

        assert "Best deals for 'bike'" in message
        assert "**Red bike** - $40.00 [Link](https://offerup.com/item/detail/1)" in message

    def test_format_no_deals(self) -> None:
        assert format_deals("bike", []) == "⚠️ No deals found for `bike`."

    def test_format_stats(self) -> None:
        message = format_stats(
            {
                "item_key": "bike",
                "tracked": True,
                "latest": {
                    "average_price": 10.4,
                    "calculated_at": "2026-03-04T05:06:07+00:00",
                },
                "listing_count": 5,
            }
        )

        assert "Latest average price: **$10.40**" in message
        assert "Last updated: 2026-03-04 05:06:07" in message
        assert "not being tracked" not in message

    def test_format_stats_untracked_without_history(self) -> None:
        message = format_stats(
            {"item_key": "bike", "tracked": False, "latest": None, "listing_count": 0}
        )

        assert "This item is not being tracked" in message
        assert "No price history found" in message

    def test_format_tracked(self) -> None:
        assert format_tracked(["bike", "desk"]).endswith("• bike\n• desk")
        assert "No items" in format_tracked([])

    def test_format_outcomes(self) -> None:
        outcomes = [
            ScrapeOutcome("bike", ScrapeResult("bike", 6, 5, Decimal("10.4"), 6), None),
            ScrapeOutcome("desk", None, "Timed out"),
            ScrapeOutcome("lamp", ScrapeResult("lamp", 0, 0, None, 0), None),
        ]

        lines = format_outcomes(outcomes).split("\n")

        assert lines[0].startswith("✅ Finished scraping for `bike`")
        assert "average $10.40" in lines[0]
        assert lines[1] == "❌ Error scraping `desk`: Timed out"
        assert "no priced listings" in lines[2]
        assert lines[3] == "🎉 Scraping completed for all tracked items!"


class TestImports:
    def test_reports_does_not_load_the_browser(self) -> None:
        """Formatting outcomes must not pull in Playwright."""
        src = Path(__file__).resolve().parent.parent / "src"
        completed = subprocess.run(
            [
                sys.executable,
                "-c",
                "import reports, sys; print('playwright' in sys.modules)",
            ],
            capture_output=True,
            text=True,
            env={**os.environ, "PYTHONPATH": str(src)},
            check=True,
        )

        assert completed.stdout.strip() == "False"
