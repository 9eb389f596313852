# ================================================================================
# =                                  DEAL_SCOUT                                  =
# ================================================================================

import datetime
import logging
import random
import sqlite3
import time
from typing import Never

from config import DATABASE, LOG_FILE, SCRAPE_INTERVAL, SCRAPE_JITTER, WEBHOOK_URL
from notifier import push_notification
from reports import format_outcomes
from repository import init_database
from results import ScrapeOutcome
from scraper import scrape_items
from tracker import list_all_tracked


def configure_logging() -> None:
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(LOG_FILE),
            logging.StreamHandler(),
        ],
    )


def run_pipeline(conn: sqlite3.Connection) -> list[ScrapeOutcome]:
    """Scrape every tracked item once and publish the summary."""
    item_keys = list_all_tracked(conn.cursor())
    if not item_keys:
        return []

    outcomes = scrape_items(conn, item_keys)

    if WEBHOOK_URL:
        push_notification(format_outcomes(outcomes))

    return outcomes


def next_delay(
    elapsed: float, interval: float = SCRAPE_INTERVAL, jitter: float = SCRAPE_JITTER
) -> float:
    """Seconds to wait before the next run, never negative."""
    return max(0.0, interval + random.uniform(-jitter, jitter) - elapsed)


def log_run(outcomes: list[ScrapeOutcome], elapsed: float) -> None:
    if not outcomes:
        logging.info(f"No tracked items, nothing scraped ({elapsed:.1f}s)")
        return

    failed = [outcome.item_key for outcome in outcomes if not outcome.success]
    logging.info(
        f"Scraped {len(outcomes) - len(failed)}/{len(outcomes)} items in {elapsed:.1f}s"
    )
    if failed:
        logging.warning(f"Failed items: {', '.join(failed)}")


def deal_scout(conn: sqlite3.Connection) -> Never:
    """Scrape all tracked items every SCRAPE_INTERVAL seconds, forever."""
    logging.info(
        f"Starting deal_scout (scrape interval: {SCRAPE_INTERVAL}s ± {SCRAPE_JITTER}s)"
    )

    while True:
        start_time = time.monotonic()

        try:
            outcomes = run_pipeline(conn)
        except sqlite3.Error as e:
            logging.error(f"Could not read tracked items: {e}")
            outcomes = []

        elapsed = time.monotonic() - start_time
        log_run(outcomes, elapsed)

        delay = next_delay(elapsed)
        if delay == 0:
            logging.warning(f"Run overran the {SCRAPE_INTERVAL}s interval")
            continue

        next_time = datetime.datetime.now() + datetime.timedelta(seconds=delay)
        logging.info(f"Next run at {next_time.strftime('%H:%M:%S')}")
        time.sleep(delay)


if __name__ == "__main__":
    configure_logging()
    conn = init_database(DATABASE)
    try:
        deal_scout(conn)
    except KeyboardInterrupt:
        logging.info("Deal scout stopped")
    finally:
        conn.close()
