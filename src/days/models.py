"""Data models for habits, the tracker, journal entries and selectors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from .errors import (
    HabitNotFoundError,
    InvalidDateError,
    LifeStartNotSetError,
    OutOfRangeError,
    StorageError,
)

ESTIMATED_YEARS = 70
DAYS_PER_YEAR = 365

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_INDEX_RE = re.compile(r"[+-]?[0-9]+")


def local_now() -> datetime:
    """Get current local time with timezone info."""
    return datetime.now().astimezone()


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO 8601 with offset, or None when unset."""
    if dt is None:
        return None
    return dt.isoformat()


def parse_timestamp(s: Optional[str]) -> Optional[datetime]:
    """Parse ISO 8601 timestamp string. Naive values are taken as local time."""
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def parse_date(s: str) -> date:
    """Parse a YYYY-MM-DD string.

    Raises:
        InvalidDateError: If the string is not a valid calendar date
    """
    if not isinstance(s, str) or not _DATE_RE.fullmatch(s):
        raise InvalidDateError(f"Invalid date '{s}': expected YYYY-MM-DD")
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date '{s}': {e}") from e


def require_timestamp(data: dict, key: str) -> datetime:
    """Parse a timestamp field that must be present and non-null.

    Raises:
        StorageError: If the field is missing or null
    """
    dt = parse_timestamp(data.get(key))
    if dt is None:
        raise StorageError(f"Unexpected document layout: missing '{key}' in {data!r}")
    return dt


def day_of(dt: datetime) -> date:
    """Local calendar day of a timestamp."""
    return dt.astimezone().date()


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from earlier to later, floored."""
    return int((later - earlier) // timedelta(days=1))


def add_years(dt: datetime, years: int) -> datetime:
    """Calendar-aware year offset. Feb 29 rolls over to Mar 1 in non-leap years."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, month=3, day=1)


# ========== Selectors ==========

@dataclass(frozen=True)
class ByIndex:
    """Select a habit by its 1-based position."""
    position: int


@dataclass(frozen=True)
class ByName:
    """Select the first habit whose action matches exactly."""
    name: str


Selector = Union[ByIndex, ByName]


def parse_selector(s: str) -> Selector:
    """Turn a user-supplied selector string into ByIndex or ByName."""
    if _INDEX_RE.fullmatch(s):
        return ByIndex(int(s))
    return ByName(s)


# ========== Tracker ==========

@dataclass
class Habit:
    """A tracked action and when it was last tracked or reset."""
    action: str
    created_at: datetime

    def days_since(self, now: datetime) -> int:
        return days_between(self.created_at, now)

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        return cls(
            action=data.get("action", ""),
            created_at=require_timestamp(data, "createdAt"),
        )


@dataclass
class LifeReport:
    """Progress through the estimated life span."""
    days_expected: int
    days_since_start: int

    @property
    def days_to_end(self) -> int:
        return self.days_expected - self.days_since_start

    @property
    def fraction(self) -> float:
        return self.days_since_start / self.days_expected

    @property
    def percentage(self) -> int:
        return int(self.fraction * 100)


@dataclass
class Tracker:
    """Habits plus the optional life start/end pair."""
    habits: list[Habit] = field(default_factory=list)
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def track(self, action: str, now: datetime) -> Habit:
        """Append a new habit tracked from now."""
        habit = Habit(action=action, created_at=now)
        self.habits.append(habit)
        return habit

    def position_of(self, selector: Selector) -> int:
        """Resolve a selector to a 0-based list position.

        Raises:
            OutOfRangeError: If a ByIndex position is outside 1..len(habits)
            HabitNotFoundError: If no habit has the ByName action
        """
        if isinstance(selector, ByIndex):
            if not 1 <= selector.position <= len(self.habits):
                raise OutOfRangeError(
                    f"Habit number {selector.position} out of range "
                    f"({len(self.habits)} habits tracked)"
                )
            return selector.position - 1

        for i, habit in enumerate(self.habits):
            if habit.action == selector.name:
                return i
        raise HabitNotFoundError(f"Habit '{selector.name}' not found")

    def find(self, selector: Selector) -> Habit:
        return self.habits[self.position_of(selector)]

    def reset(self, selector: Selector, now: datetime) -> Habit:
        habit = self.find(selector)
        habit.created_at = now
        return habit

    def set_life_start(self, date_string: str) -> None:
        """Set the life start date and derive the estimated end."""
        d = parse_date(date_string)
        start = datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        try:
            end = add_years(start, ESTIMATED_YEARS)
        except ValueError as e:
            raise InvalidDateError(
                f"Invalid date '{date_string}': estimated end is past year 9999"
            ) from e
        self.start = start
        self.end = end

    def life_report(self, now: datetime) -> LifeReport:
        if self.start is None:
            raise LifeStartNotSetError(
                "Life start date not set; run 'days life start YYYY-MM-DD' first"
            )
        return LifeReport(
            days_expected=ESTIMATED_YEARS * DAYS_PER_YEAR,
            days_since_start=days_between(self.start, now),
        )

    def to_dict(self) -> dict:
        return {
            "start": format_timestamp(self.start),
            "habits": [h.to_dict() for h in self.habits],
            "end": format_timestamp(self.end),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Tracker":
        return cls(
            habits=[Habit.from_dict(h) for h in data.get("habits") or []],
            start=parse_timestamp(data.get("start")),
            end=parse_timestamp(data.get("end")),
        )


# ========== Journal ==========

@dataclass
class Entry:
    """A single journal entry."""
    text: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        return cls(
            text=data.get("text", ""),
            created_at=require_timestamp(data, "createdAt"),
        )


def _as_date(value: Union[str, date, None], default: date) -> date:
    if value is None or value == "":
        return default
    if isinstance(value, date):
        return value
    return parse_date(value)


@dataclass
class Journal:
    """Append-only log of entries, kept in creation order."""
    entries: list[Entry] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def ensure_created(self, now: datetime) -> None:
        if self.created_at is None:
            self.created_at = now

    def write(self, text: str, now: datetime) -> Entry:
        """Append an entry. Never edits existing entries."""
        entry = Entry(text=text, created_at=now)
        self.entries.append(entry)
        self.updated_at = now
        self.ensure_created(now)
        return entry

    def list_range(
        self,
        start: Union[str, date, None] = None,
        end: Union[str, date, None] = None,
        today: Optional[date] = None,
    ) -> list[Entry]:
        """Entries whose local day falls within [start, end] inclusive.

        Relies on entries being in creation order; the list is not re-sorted.

        Args:
            start: First day (YYYY-MM-DD or date), defaults to today
            end: Last day (YYYY-MM-DD or date), defaults to start
            today: Override for the current day

        Raises:
            InvalidDateError: If a date string is malformed
        """
        if today is None:
            today = day_of(local_now())
        start_day = _as_date(start, today)
        end_day = _as_date(end, start_day)

        start_index = -1
        for i, entry in enumerate(self.entries):
            if day_of(entry.created_at) >= start_day:
                start_index = i
                break
        if start_index == -1:
            return []

        end_index = -1
        for i in range(len(self.entries) - 1, -1, -1):
            if day_of(self.entries[i].created_at) <= end_day:
                end_index = i
                break
        if end_index < start_index:
            return []

        return self.entries[start_index:end_index + 1]

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "updatedAt": format_timestamp(self.updated_at),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Journal":
        return cls(
            entries=[Entry.from_dict(e) for e in data.get("entries") or []],
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )
