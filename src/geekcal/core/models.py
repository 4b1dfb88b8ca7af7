"""Event record model and the normalized collection form.

An event has no identity field: two events are the same when all four
fields are equal. Collections are compared in normalized form, sorted by
(year, month, day, text), because insertion order differs between
replicas for reasons unrelated to content (import order, manual edits).
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Event:
    """A single calendar entry.

    Attributes:
        year: Four-digit year.
        month: Month index, 0-based (0 = January).
        day: Day of month, 1-based.
        text: Free-form event text.
    """

    year: int
    month: int
    day: int
    text: str

    @property
    def sort_key(self) -> tuple[int, int, int, str]:
        return (self.year, self.month, self.day, self.text)

    @classmethod
    def from_dict(cls, data: Any) -> Event:
        """Create from a stored JSON object.

        Raises:
            ValueError: If the object is not a well-formed event.
        """
        if not isinstance(data, dict):
            raise ValueError(f"event must be an object, got {type(data).__name__}")
        for key in ("year", "month", "day"):
            value = data.get(key)
            # bool is an int subclass but never a valid date component
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"event field {key!r} must be an integer, got {value!r}")
        if not isinstance(data.get("text"), str):
            raise ValueError(f"event field 'text' must be a string, got {data.get('text')!r}")
        return cls(
            year=data["year"],
            month=data["month"],
            day=data["day"],
            text=data["text"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "text": self.text,
        }


def normalize(events: Iterable[Event]) -> list[Event]:
    """Return the canonical ordering of a collection."""
    return sorted(events, key=lambda e: e.sort_key)


def serialize(events: Iterable[Event]) -> str:
    """Serialize a collection in normalized form with two-space indentation."""
    return json.dumps(
        [e.to_dict() for e in normalize(events)],
        indent=2,
        ensure_ascii=False,
    )


def parse_events(text: str) -> list[Event]:
    """Parse a JSON array of events.

    Raises:
        ValueError: If the text is not JSON or not an array of events.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON array of events, got {type(raw).__name__}")
    return [Event.from_dict(item) for item in raw]


def collections_equal(a: Iterable[Event], b: Iterable[Event]) -> bool:
    """Normalized equality: order of the inputs does not matter."""
    return serialize(a) == serialize(b)
