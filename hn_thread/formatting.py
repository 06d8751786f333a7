from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

from hn_thread.config import SITE_BASE
from hn_thread.models import StoryItem
from hn_thread.utils import ensure_utc

_PREFIXES = ("https://", "http://", "www.")

_UNITS = ("years", "months", "days", "hours", "minutes")


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def score_text(score: int) -> str:
    return _plural(score, "point")


def comment_count_text(count: int) -> str:
    return _plural(count, "comment")


def hostname(url: Optional[str]) -> str:
    """
    Short host for display next to a title, e.g. "example.com".

    "https://", then "http://", then "www." are stripped from the front,
    each at most once; anything from the first "/" on is dropped. Ports
    and query strings are left alone.
    """
    host = url or ""
    for prefix in _PREFIXES:
        if host.startswith(prefix):
            host = host[len(prefix):]
    return host.split("/", 1)[0]


def time_text(dt: datetime) -> str:
    """
    Format an instant as "MM/DD/YY HH:MM AM" in UTC.

    The hour is on a 12 hour clock padded with a space, and the AM/PM
    marker is always English regardless of the process locale.
    """
    dt = ensure_utc(dt)
    hour = dt.hour % 12 or 12
    marker = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month:02d}/{dt.day:02d}/{dt.year % 100:02d} {hour:>2}:{dt.minute:02d} {marker}"


def relative_time(dt: datetime, now: Optional[datetime] = None) -> str:
    """Describe how long ago dt was, e.g. "3 hours ago" or "1 year ago"."""
    now = ensure_utc(now or datetime.now(timezone.utc))
    dt = ensure_utc(dt)
    if dt >= now:
        return "just now"

    delta = relativedelta(now, dt)
    for unit in _UNITS:
        value = getattr(delta, unit)
        if value:
            return f"{_plural(value, unit[:-1])} ago"
    return "just now"


def comment_count(story: StoryItem) -> int:
    # kids as listed by the API, whether or not they have been resolved
    return len(story.kids)


@dataclass(frozen=True)
class StoryListing:
    title: str
    url: str
    hostname: str
    site_url: str
    score: str
    by: str
    time: str
    comments: int


def story_listing(story: StoryItem, site_base: str = SITE_BASE) -> StoryListing:
    """Build the display strings for one row of a story list."""
    url = story.url or ""
    host = hostname(url)
    return StoryListing(
        title=story.title,
        url=url,
        hostname=host,
        site_url=f"{site_base}/from?site={host}",
        score=score_text(story.score),
        by=story.by,
        time=time_text(story.time),
        comments=comment_count(story),
    )
