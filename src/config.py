import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Storage
DATABASE = Path(os.getenv("DEAL_SCOUT_DATABASE", "data/deal_scout.db"))
LOG_FILE = Path(os.getenv("DEAL_SCOUT_LOG_FILE", "logs/deal_scout.log"))

# Marketplace - search page and result markers
MARKETPLACE_URL = os.getenv("DEAL_SCOUT_MARKETPLACE_URL", "https://offerup.com")
SEARCH_PATH = "/search?q="
RESULT_SELECTOR = "a[href*='/item']"
PAGE_TIMEOUT = float(os.getenv("DEAL_SCOUT_PAGE_TIMEOUT", "30"))  # Seconds
HEADLESS = os.getenv("DEAL_SCOUT_HEADLESS", "true").lower() != "false"

# Tracking
MAX_TRACKED_ITEMS = 10  # Per workspace

# Analysis - outlier filtering and deal selection
PRICE_FLOOR = 1  # Extracted prices at or below this are garbage
IQR_MULTIPLIER = 1.5
DEAL_COUNT = 5  # Deals taken from each of the low and market-rate sets

# Scheduling
SCRAPE_INTERVAL = int(os.getenv("DEAL_SCOUT_SCRAPE_INTERVAL", "3600"))  # Seconds
SCRAPE_JITTER = 60  # ± Seconds randomization

# Chat
WEBHOOK_URL = os.getenv("DEAL_SCOUT_WEBHOOK_URL")
COMMAND_PREFIX = "!"
MAX_MESSAGE_LENGTH = 2000  # Webhook body limit in characters
