"""Core engine - each command as one load/mutate/save cycle over a store."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Generator, Union

from .config import DaysConfig
from .errors import StorageError
from .models import (
    Entry,
    Habit,
    Journal,
    LifeReport,
    Tracker,
    day_of,
    local_now,
    parse_selector,
)
from .render import habit_description, habit_lines, life_lines
from .store import JOURNAL_DEFAULT, TRACKER_DEFAULT, UnitOfWork, unit_of_work


class DaysEngine:
    """Tracker and journal operations bound to one data directory."""

    def __init__(self, config: DaysConfig, clock: Callable[[], datetime] = local_now):
        self.config = config
        self.clock = clock

    def _ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist.

        Raises:
            StorageError: If the directory cannot be created
        """
        try:
            self.config.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.config.data_dir}: {e}") from e

    @contextmanager
    def tracker_session(self) -> Generator[UnitOfWork[Tracker], None, None]:
        """Load the tracker; it is saved on exit if marked changed."""
        self._ensure_directories()
        with unit_of_work(
            self.config.get_tracker_path(),
            TRACKER_DEFAULT,
            Tracker.from_dict,
            lock_timeout=self.config.lock_timeout,
        ) as work:
            yield work

    @contextmanager
    def journal_session(self) -> Generator[UnitOfWork[Journal], None, None]:
        """Load the journal; it is saved on exit if marked changed."""
        self._ensure_directories()
        with unit_of_work(
            self.config.get_journal_path(),
            JOURNAL_DEFAULT,
            Journal.from_dict,
            lock_timeout=self.config.lock_timeout,
        ) as work:
            work.value.ensure_created(self.clock())
            yield work

    # ========== Tracker Operations ==========

    def track(self, action: str) -> Habit:
        """Start tracking a habit from now."""
        with self.tracker_session() as work:
            habit = work.value.track(action, self.clock())
            work.mark_changed()
        return habit

    def list_habits(self) -> list[str]:
        with self.tracker_session() as work:
            return habit_lines(work.value.habits, self.clock())

    def since(self, selector: str) -> str:
        """Description line for one habit.

        Raises:
            OutOfRangeError: Numeric selector outside the habit list
            HabitNotFoundError: No habit with that name
        """
        with self.tracker_session() as work:
            habit = work.value.find(parse_selector(selector))
            return habit_description(habit, self.clock())

    def reset(self, selector: str) -> Habit:
        """Restart a habit's day count from now."""
        with self.tracker_session() as work:
            habit = work.value.reset(parse_selector(selector), self.clock())
            work.mark_changed()
        return habit

    def life_start(self, date_string: str) -> Tracker:
        """Record the life start date (YYYY-MM-DD).

        Raises:
            InvalidDateError: If the date is malformed
        """
        with self.tracker_session() as work:
            work.value.set_life_start(date_string)
            work.mark_changed()
        return work.value

    def life_report(self) -> LifeReport:
        with self.tracker_session() as work:
            return work.value.life_report(self.clock())

    def life_end(self, verbose: bool = False) -> list[str]:
        """Summary, progress bar and, if verbose, the day grid.

        Raises:
            LifeStartNotSetError: If no life start date has been recorded
        """
        return life_lines(self.life_report(), self.config.display, verbose=verbose)

    # ========== Journal Operations ==========

    def journal_write(self, text: str) -> Entry:
        """Append an entry to the journal."""
        with self.journal_session() as work:
            entry = work.value.write(text, self.clock())
            work.mark_changed()
        return entry

    def journal_read(
        self,
        start: Union[str, date, None] = None,
        end: Union[str, date, None] = None,
    ) -> list[Entry]:
        """Entries created between start and end days inclusive.

        Raises:
            InvalidDateError: If a date is malformed
        """
        today = day_of(self.clock())
        with self.journal_session() as work:
            return work.value.list_range(start, end, today=today)
