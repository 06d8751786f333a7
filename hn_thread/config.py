from __future__ import annotations

from dataclasses import dataclass, field

API_BASE = "https://hacker-news.firebaseio.com/v0"
SITE_BASE = "https://news.ycombinator.com"

DEFAULT_TIMEOUT = 10.0
DEFAULT_MIN_INTERVAL_MS = 250.0
DEFAULT_MAX_CONCURRENCY = 8

HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "no-cache",
    "User-Agent": "hackernews-thread/0.1 (+https://github.com/HackerNews/API)",
}


@dataclass
class ClientConfig:
    """
    Connection settings shared by the sync and async clients.

    min_interval_ms is the politeness gap between two requests. Set it to 0
    to disable throttling, e.g. in tests.
    """

    api_base: str = API_BASE
    site_base: str = SITE_BASE
    timeout: float = DEFAULT_TIMEOUT
    min_interval_ms: float = DEFAULT_MIN_INTERVAL_MS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    headers: dict = field(default_factory=lambda: dict(HEADERS))

    def item_url(self, item_id: int) -> str:
        return f"{self.api_base}/item/{item_id}.json"

    def top_stories_url(self) -> str:
        return f"{self.api_base}/topstories.json"

    def site_item_url(self, item_id: int) -> str:
        return f"{self.site_base}/item?id={item_id}"
