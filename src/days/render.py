"""Plain-text rendering of habits, life progress and journal entries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from .config import DisplayConfig
from .models import Entry, Habit, LifeReport, day_of


def habit_description(habit: Habit, now: datetime) -> str:
    return f"{habit.action} ({habit.days_since(now)} days since)"


def habit_lines(habits: Iterable[Habit], now: datetime) -> list[str]:
    """Numbered description lines, 1-based in storage order."""
    return [
        f"{i}) {habit_description(habit, now)}"
        for i, habit in enumerate(habits, start=1)
    ]


def life_summary(report: LifeReport) -> list[str]:
    return [
        "",
        "Summary:",
        f"days expected: {report.days_expected}",
        f"days exhausted: {report.days_since_start}",
        f"days till the END: {report.days_to_end}",
    ]


def progress_bar(report: LifeReport, display: DisplayConfig) -> list[str]:
    """Fixed-width bar: floor(fraction * width) filled cells, then the percentage."""
    width = display.progress_width
    filled = min(max(int(report.fraction * width), 0), width)
    bar = display.filled_glyph * filled + display.empty_glyph * (width - filled)
    return [
        "",
        "Progress:",
        f"{bar} {report.percentage}%",
    ]


def detail_grid(report: LifeReport, display: DisplayConfig) -> list[str]:
    """One cell per expected day, wrapped into rows prefixed by the row's first index."""
    columns = display.grid_columns
    lines = ["", "Details:", "=" * max(display.grid_width - 1, 0)]

    for row_start in range(0, report.days_expected, columns):
        row_end = min(row_start + columns, report.days_expected)
        cells = "".join(
            display.passed_glyph if i <= report.days_since_start else display.future_glyph
            for i in range(row_start, row_end)
        )
        lines.append(f"{row_start:05d}| {cells}")

    return lines


def life_lines(report: LifeReport, display: DisplayConfig, verbose: bool = False) -> list[str]:
    lines = life_summary(report) + progress_bar(report, display)
    if verbose:
        lines += detail_grid(report, display)
    return lines


def military_time(dt: datetime) -> str:
    """24-hour HHMM in local time."""
    local = dt.astimezone()
    return f"{local.hour:02d}{local.minute:02d}"


def entry_lines(entries: Iterable[Entry]) -> list[str]:
    """Entries grouped under a header for each calendar day, in the order given."""
    lines: list[str] = []
    current_day: Optional[date] = None

    for entry in entries:
        entry_day = day_of(entry.created_at)
        if entry_day != current_day:
            current_day = entry_day
            lines.extend(["", current_day.isoformat(), "-" * 10])

        lines.extend(["", military_time(entry.created_at), "----", entry.text])

    return lines
