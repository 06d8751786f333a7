from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, TypedDict

from hn_thread.exceptions import MalformedRecord
from hn_thread.utils import datetime_to_timestamp, timestamp_to_datetime


class RawItem(TypedDict, total=False):
    """
    Item record as served by /v0/item/<id>.json.

    Every key is optional here; the entity constructors decide which ones
    are required and which ones fall back to a default.
    """

    id: int
    type: str
    by: str
    time: int
    title: str
    url: str
    text: str
    score: int
    descendants: int
    kids: List[int]
    sub_comments: List["RawItem"]
    comments: List["RawItem"]


_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_int64(value: Any) -> bool:
    return _is_int(value) and _INT64_MIN <= value <= _INT64_MAX


def _as_record(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"expected a mapping, got {type(raw).__name__}")
    return raw


def _required_int(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        raise MalformedRecord(f"missing required field {key!r}")
    if not _is_int64(value):
        raise MalformedRecord(f"field {key!r} must be a 64-bit integer, got {value!r}")
    return value


def _required_str(raw: Mapping[str, Any], key: str, allow_empty: bool = True) -> str:
    value = raw.get(key)
    if value is None:
        raise MalformedRecord(f"missing required field {key!r}")
    if not isinstance(value, str):
        raise MalformedRecord(f"field {key!r} must be a string, got {value!r}")
    if not allow_empty and not value.strip():
        raise MalformedRecord(f"field {key!r} must not be empty")
    return value


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRecord(f"field {key!r} must be a string, got {value!r}")
    return value


def _str_or_empty(raw: Mapping[str, Any], key: str) -> str:
    return _optional_str(raw, key) or ""


def _count(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    if not _is_int64(value) or value < 0:
        raise MalformedRecord(f"field {key!r} must be a non-negative integer, got {value!r}")
    return value


def _kids(raw: Mapping[str, Any]) -> list[int]:
    value = raw.get("kids")
    if value is None:
        return []
    if not isinstance(value, list) or not all(_is_int64(kid) for kid in value):
        raise MalformedRecord(f"field 'kids' must be a list of 64-bit integers, got {value!r}")
    return list(value)


def _time(raw: Mapping[str, Any]) -> datetime:
    seconds = _required_int(raw, "time")
    try:
        return timestamp_to_datetime(seconds)
    except OverflowError as exc:
        raise MalformedRecord(f"field 'time' is out of range: {seconds!r}") from exc


def _record_list(raw: Mapping[str, Any], key: str) -> list:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedRecord(f"field {key!r} must be a list, got {value!r}")
    return value


@dataclass
class StoryItem:
    """
    A single discussion-starting post (story, job, poll, ...).

    Only id, title, time and type are required on input; everything else
    falls back to an empty value so that sparse records still load.
    """

    id: int
    title: str
    time: datetime
    type: str
    url: Optional[str] = None
    text: Optional[str] = None
    by: str = ""
    score: int = 0
    descendants: int = 0
    kids: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: RawItem | Mapping[str, Any]) -> StoryItem:
        record = _as_record(raw)
        return cls(
            id=_required_int(record, "id"),
            title=_required_str(record, "title", allow_empty=False),
            time=_time(record),
            type=_required_str(record, "type"),
            url=_optional_str(record, "url"),
            text=_optional_str(record, "text"),
            by=_str_or_empty(record, "by"),
            score=_count(record, "score"),
            descendants=_count(record, "descendants"),
            kids=_kids(record),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "by": self.by,
            "score": self.score,
            "descendants": self.descendants,
            "time": datetime_to_timestamp(self.time),
            "kids": list(self.kids),
            "type": self.type,
        }
        if self.url is not None:
            data["url"] = self.url
        if self.text is not None:
            data["text"] = self.text
        return data


@dataclass
class Comment:
    """
    One node of a discussion thread.

    kids holds the child ids as the API lists them; sub_comments holds the
    children that were actually resolved, in the same order. Deleted or
    flagged comments simply arrive with empty by/text.
    """

    id: int
    time: datetime
    type: str
    by: str = ""
    text: str = ""
    kids: list[int] = field(default_factory=list)
    sub_comments: list[Comment] = field(default_factory=list)

    @classmethod
    def _from_fields(cls, raw: Any) -> Comment:
        record = _as_record(raw)
        return cls(
            id=_required_int(record, "id"),
            time=_time(record),
            type=_required_str(record, "type"),
            by=_str_or_empty(record, "by"),
            text=_str_or_empty(record, "text"),
            kids=_kids(record),
        )

    @classmethod
    def from_dict(cls, raw: RawItem | Mapping[str, Any]) -> Comment:
        root = cls._from_fields(raw)
        stack = [(root, raw)]
        while stack:
            parent, parent_raw = stack.pop()
            for child_raw in _record_list(parent_raw, "sub_comments"):
                child = cls._from_fields(child_raw)
                parent.sub_comments.append(child)
                stack.append((child, child_raw))
        return root

    def _fields_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "by": self.by,
            "text": self.text,
            "time": datetime_to_timestamp(self.time),
            "kids": list(self.kids),
            "sub_comments": [],
            "type": self.type,
        }

    def to_dict(self) -> dict[str, Any]:
        root = self._fields_dict()
        stack = [(self, root)]
        while stack:
            comment, out = stack.pop()
            for child in comment.sub_comments:
                child_out = child._fields_dict()
                out["sub_comments"].append(child_out)
                stack.append((child, child_out))
        return root


@dataclass
class StoryPageData:
    """A story together with its resolved top-level comments."""

    item: StoryItem
    comments: list[Comment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: RawItem | Mapping[str, Any]) -> StoryPageData:
        # item fields sit next to "comments" in the same object
        record = _as_record(raw)
        return cls(
            item=StoryItem.from_dict(record),
            comments=[Comment.from_dict(c) for c in _record_list(record, "comments")],
        )

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["comments"] = [comment.to_dict() for comment in self.comments]
        return data
