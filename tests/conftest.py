"""Shared fixtures for deal_scout tests."""

import sqlite3
from collections.abc import Iterator

import pytest

from repository import init_database


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """In-memory database with the full schema."""
    connection = init_database(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def cursor(conn: sqlite3.Connection) -> sqlite3.Cursor:
    return conn.cursor()


def result_html(*items: tuple[str, str | None, str]) -> str:
    """Render a search result page from (title, aria-label, href) tuples."""
    links = []
    for title, label, href in items:
        label_attr = f' aria-label="{label}"' if label is not None else ""
        links.append(f'<a href="{href}" title="{title}"{label_attr}>{title}</a>')
    return f"<html><body><div id='results'>{''.join(links)}</div></body></html>"
