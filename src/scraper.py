import logging
import sqlite3
from collections.abc import Callable
from typing import NamedTuple

import bs4
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from aggregator import Analysis, Listing, analyze
from config import (
    HEADLESS,
    MARKETPLACE_URL,
    PAGE_TIMEOUT,
    PRICE_FLOOR,
    RESULT_SELECTOR,
)
from normalizer import build_search_url, extract_price
from repository import insert_average_price, insert_best_deal, insert_listing
from results import ScrapeOutcome, ScrapeResult


class ScrapeError(Exception):
    """A scrape could not fetch the marketplace result page."""


class FetchTimeout(ScrapeError):
    pass


class FetchFailure(ScrapeError):
    pass


class RawListing(NamedTuple):
    title: str | None
    label: str | None
    url: str | None


Fetcher = Callable[[str, str, float], str]


def fetch_result_page(
    url: str, selector: str = RESULT_SELECTOR, timeout: float = PAGE_TIMEOUT
) -> str:
    """Render a search page in headless Chromium and return its HTML.

    Blocks until at least one element matches the selector or the timeout (in
    seconds) elapses. The browser is closed on every exit path.
    """
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=HEADLESS)
            try:
                page = browser.new_context().new_page()
                page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)
                page.wait_for_selector(selector, timeout=timeout * 1000)
                return page.content()
            finally:
                browser.close()
    except PlaywrightTimeoutError as e:
        raise FetchTimeout(f"Timed out after {timeout}s waiting for {url}") from e
    except PlaywrightError as e:
        raise FetchFailure(f"Failed to load {url}: {e}") from e


def extract_listings(
    soup: bs4.BeautifulSoup, selector: str = RESULT_SELECTOR
) -> list[RawListing]:
    """Extract title, price label and link of every search result."""
    return [
        RawListing(
            title=item.get("title"),
            label=item.get("aria-label"),
            url=item.get("href"),
        )
        for item in soup.select(selector)
    ]


def price_listings(raw_listings: list[RawListing]) -> list[Listing]:
    """Attach extracted prices, dropping listings without a usable one."""
    listings = []
    for raw in raw_listings:
        price = extract_price(raw.label)
        if price > PRICE_FLOOR:
            listings.append(Listing(raw.title or "", price, raw.url or ""))
    return listings


def save_analysis(conn: sqlite3.Connection, item_key: str, analysis: Analysis) -> None:
    """Persist valid listings, the market average and the best deals."""
    cursor = conn.cursor()

    # One snapshot is written whole or not at all
    with conn:
        for listing in analysis.valid:
            insert_listing(cursor, item_key, listing.title, listing.price, listing.url)

        if analysis.average is not None:
            insert_average_price(cursor, item_key, analysis.average)

        for deal in analysis.best_deals:
            insert_best_deal(cursor, item_key, deal.title, deal.price, deal.url)


def scrape(
    conn: sqlite3.Connection,
    item_key: str,
    fetch: Fetcher = fetch_result_page,
    base_url: str = MARKETPLACE_URL,
) -> ScrapeResult:
    """Scrape one item's search results and record the market analysis."""
    url = build_search_url(item_key, base_url)
    logging.info(f"Scraping '{item_key}' from {url}")

    html = fetch(url, RESULT_SELECTOR, PAGE_TIMEOUT)
    soup = bs4.BeautifulSoup(html, "html.parser")
    listings = price_listings(extract_listings(soup))

    analysis = analyze(listings, base_url)
    if analysis is None:
        logging.info(f"No priced listings found for '{item_key}'")
        return ScrapeResult(item_key, 0, 0, None, 0)

    save_analysis(conn, item_key, analysis)

    logging.info(
        f"Saved {len(analysis.valid)} listings and {len(analysis.best_deals)} deals for '{item_key}'"
    )
    return ScrapeResult(
        item_key,
        len(listings),
        len(analysis.valid),
        analysis.average,
        len(analysis.best_deals),
    )


def scrape_items(
    conn: sqlite3.Connection,
    item_keys: list[str],
    fetch: Fetcher = fetch_result_page,
    base_url: str = MARKETPLACE_URL,
) -> list[ScrapeOutcome]:
    """Scrape items one at a time; a failing item never stops the batch."""
    outcomes = []

    for item_key in item_keys:
        try:
            result = scrape(conn, item_key, fetch, base_url)
        except Exception as e:
            logging.error(f"Failed to scrape '{item_key}': {e}")
            conn.rollback()
            outcomes.append(ScrapeOutcome(item_key, None, str(e)))
            continue
        outcomes.append(ScrapeOutcome(item_key, result, None))

    return outcomes
