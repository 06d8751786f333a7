from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NoSelection:
    """The story list is showing."""


@dataclass(frozen=True)
class Selected:
    """A story detail page is showing. The id is not validated here."""

    story_id: int


Selection = Union[NoSelection, Selected]

_STORY_ROUTE = re.compile(r"^/story/(-?\d+)/?$")


def select(state: Selection, story_id: int) -> Selected:
    return Selected(story_id)


def back(state: Selection) -> NoSelection:
    return NoSelection()


def route_path(state: Selection) -> str:
    if isinstance(state, Selected):
        return f"/story/{state.story_id}"
    return "/"


def parse_route(path: str) -> Selection:
    """Map a path produced by route_path back to a selection state."""
    if path in ("", "/"):
        return NoSelection()
    match = _STORY_ROUTE.match(path)
    if not match:
        raise ValueError(f"Unknown route: {path!r}")
    return Selected(int(match.group(1)))
