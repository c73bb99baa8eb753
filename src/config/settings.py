# src/config/settings.py

"""Central configuration for the price_alert tracker."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer override, falling back on missing/garbage values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    """Read a float override, falling back on missing/garbage values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings:
    """Central configuration for the price_alert tracker."""

    # --- Scraping ---
    MAX_RETRIES: int = max(_env_int("MAX_RETRIES", 3), 1)
    REQUEST_TIMEOUT: int = _env_int("REQUEST_TIMEOUT", 30)    # Seconds
    REQUEST_DELAY: float = _env_float("DELAY_BETWEEN_REQUESTS", 2.0)
    RETRY_BASE_DELAY: float = _env_float("RETRY_BASE_DELAY", 1.0)
    SETTLE_DELAY: float = _env_float("SETTLE_DELAY", 2.0)    # Post-load wait
    DEBUG_SCRAPER: bool = os.getenv("DEBUG_SCRAPER", "") in ("1", "true")

    # --- Price history ---
    ENABLE_PRICE_HISTORY: bool = (
        os.getenv("ENABLE_PRICE_HISTORY", "") != "false"
    )
    MAX_HISTORY_ENTRIES: int = max(_env_int("MAX_HISTORY_ENTRIES", 100), 0)

    # --- Money ---
    DEFAULT_CURRENCY: str = "USD"
    UNKNOWN_TITLE: str = "Unknown Product"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_FILE: Path = Path(
        os.getenv("DATA_FILE", str(BASE_DIR / "data" / "products.json"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Retailers (detection order matters: first match wins) ---
    AVAILABLE_RETAILERS: list[dict[str, str]] = [
        {"id": "amazon", "label": "Amazon", "domain": "amazon.com"},
        {"id": "bestbuy", "label": "Best Buy", "domain": "bestbuy.com"},
        {"id": "walmart", "label": "Walmart", "domain": "walmart.com"},
        {"id": "costco", "label": "Costco", "domain": "costco.com"},
        {"id": "gamestop", "label": "GameStop", "domain": "gamestop.com"},
        {
            "id": "microcenter",
            "label": "Micro Center",
            "domain": "microcenter.com",
        },
        {"id": "target", "label": "Target", "domain": "target.com"},
    ]
