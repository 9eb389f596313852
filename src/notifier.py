import logging

import requests

from config import MAX_MESSAGE_LENGTH, WEBHOOK_URL


def split_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a message on line boundaries into chunks no longer than limit.

    Lines longer than limit are hard-wrapped. Blank lines are kept, except
    where a chunk would consist of nothing else.
    """
    chunks = []
    current: list[str] = []
    size = 0

    for line in message.split("\n"):
        wrapped = False
        while len(line) > limit:
            if current:
                chunks.append("\n".join(current))
                current, size = [], 0
            chunks.append(line[:limit])
            line = line[limit:]
            wrapped = True

        if wrapped and not line:
            continue

        added = len(line) + 1 if current else len(line)
        if current and size + added > limit:
            chunks.append("\n".join(current))
            current, size = [line], len(line)
        else:
            current.append(line)
            size += added

    if current:
        chunks.append("\n".join(current))

    return [chunk for chunk in chunks if chunk.strip()]


def push_notification(message: str, webhook_url: str | None = WEBHOOK_URL) -> bool:
    """Post a message to the chat webhook. Returns True if every part was sent."""
    if not webhook_url:
        logging.error("DEAL_SCOUT_WEBHOOK_URL not set")
        return False

    try:
        for chunk in split_message(message):
            r = requests.post(webhook_url, json={"content": chunk}, timeout=10)
            r.raise_for_status()
        logging.info("Webhook notification sent successfully")
        return True
    except requests.RequestException as e:
        logging.error(f"Failed to send webhook notification: {e}")
        return False
