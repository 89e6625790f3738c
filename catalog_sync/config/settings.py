# catalog_sync/config/settings.py

"""Central configuration for the catalog_sync client."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the catalog_sync client."""

    # --- Backend ---
    API_BASE_URL: str = os.getenv(
        "CATALOG_API_URL", "http://localhost:3001"
    ).rstrip("/")
    PRODUCTS_PATH: str = "/products"
    COMMENTS_PATH: str = "/comments"

    # --- Transport ---
    REQUEST_TIMEOUT: float = float(
        os.getenv("CATALOG_REQUEST_TIMEOUT", "10")
    )                                   # Seconds before a request times out
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }

    # --- Health ---
    SLOW_THRESHOLD_MS: float = 2000.0   # Latency above this is "slow"

    # --- View ---
    DEFAULT_SORT: str = "name"          # "name" or "count"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv(
        "CATALOG_LOG_LEVEL", "WARNING"
    ).upper()                           # stderr threshold (CLI only)

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
