"""Line-oriented stand-in for the chat connector.

Reads `!command` lines from stdin on behalf of one workspace and prints the
replies, e.g. `python src/console.py my-server`.
"""

import logging
import os
import sqlite3
import sys
from typing import TextIO

from commands import handle_message
from config import DATABASE
from deal_scout import configure_logging
from repository import init_database


def run_console(
    conn: sqlite3.Connection,
    workspace_id: str,
    lines: TextIO = sys.stdin,
    out: TextIO = sys.stdout,
) -> None:
    for line in lines:
        try:
            result = handle_message(conn, workspace_id, line)
        except sqlite3.Error as e:
            logging.error(f"Command failed for workspace {workspace_id}: {e}")
            print(f"❌ Command failed: {e}", file=out)
            continue

        if result is not None:
            print(result.message, file=out)


if __name__ == "__main__":
    configure_logging()

    workspace = sys.argv[1] if len(sys.argv) > 1 else os.getenv("DEAL_SCOUT_WORKSPACE")
    if not workspace:
        logging.error("Usage: console.py <workspace-id> (or set DEAL_SCOUT_WORKSPACE)")
        sys.exit(1)

    connection = init_database(DATABASE)
    try:
        run_console(connection, workspace)
    except KeyboardInterrupt:
        logging.info("Console stopped")
    finally:
        connection.close()
