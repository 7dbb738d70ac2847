"""Entry point for the quickorder Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from quickorder.api import ApiClient
from quickorder.cache import LocalCache
from quickorder.config import API_BASE_URL, CACHE_DB_PATH, DEBUG_LOG_PATH
from quickorder.order_app import QuickOrderApp
from quickorder.store import OrderStore


def configure_logging(log_path: str = DEBUG_LOG_PATH, level: int = logging.INFO) -> None:
    """Send log records to a file; the terminal belongs to the UI."""
    path = Path(log_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("quickorder")
    root.setLevel(level)
    root.addHandler(handler)


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    logging.getLogger(__name__).info("app_start api=%s cache=%s", API_BASE_URL, CACHE_DB_PATH)
    store = OrderStore(ApiClient(API_BASE_URL), LocalCache(CACHE_DB_PATH))
    QuickOrderApp(store).run()


if __name__ == "__main__":
    main()
