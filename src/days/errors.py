"""Exception hierarchy for days operations."""

from __future__ import annotations


class DaysError(Exception):
    """Base exception for days operations."""
    pass


class HabitNotFoundError(DaysError):
    """Raised when a selector matches no habit by name."""
    pass


class OutOfRangeError(DaysError):
    """Raised when a numeric selector falls outside the habit list."""
    pass


class InvalidDateError(DaysError):
    """Raised when a date string is not in YYYY-MM-DD form."""
    pass


class StorageError(DaysError):
    """Raised when a backing file cannot be opened, read, decoded or written."""
    pass


class UsageError(DaysError):
    """Raised for bad or missing command-line arguments."""
    pass


class LifeStartNotSetError(UsageError):
    """Raised when life progress is requested before a start date exists."""
    pass
