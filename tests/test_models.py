"""Tests for the tracker and journal data models."""

import json
from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import local_dt
from days.errors import (
    HabitNotFoundError,
    InvalidDateError,
    LifeStartNotSetError,
    OutOfRangeError,
    StorageError,
)
from days.models import (
    ByIndex,
    ByName,
    Entry,
    Habit,
    Journal,
    Tracker,
    add_years,
    days_between,
    parse_date,
    parse_selector,
    parse_timestamp,
)


@pytest.fixture
def now():
    return local_dt(2024, 3, 15, 9, 30)


@pytest.fixture
def abc_tracker(now):
    tracker = Tracker()
    for name in ("A", "B", "C"):
        tracker.track(name, now)
    return tracker


class TestParseSelector:
    """Tests for parse_selector."""

    def test_digits_select_by_index(self):
        assert parse_selector("2") == ByIndex(2)

    def test_signed_numbers_select_by_index(self):
        assert parse_selector("-1") == ByIndex(-1)
        assert parse_selector("+3") == ByIndex(3)

    def test_names_select_by_name(self):
        assert parse_selector("B") == ByName("B")
        assert parse_selector("2nd habit") == ByName("2nd habit")

    def test_empty_string_is_a_name(self):
        assert parse_selector("") == ByName("")


class TestTrackerLookup:
    """Tests for resolving selectors against the habit list."""

    def test_index_resolves_one_based(self, abc_tracker):
        assert abc_tracker.find(parse_selector("2")).action == "B"

    def test_name_resolves_exact_match(self, abc_tracker):
        assert abc_tracker.find(parse_selector("B")).action == "B"

    def test_index_past_end_is_out_of_range(self, abc_tracker):
        with pytest.raises(OutOfRangeError):
            abc_tracker.find(parse_selector("9"))

    def test_zero_and_negative_are_out_of_range(self, abc_tracker):
        with pytest.raises(OutOfRangeError):
            abc_tracker.find(ByIndex(0))
        with pytest.raises(OutOfRangeError):
            abc_tracker.find(ByIndex(-1))

    def test_unknown_name_not_found(self, abc_tracker):
        with pytest.raises(HabitNotFoundError):
            abc_tracker.find(parse_selector("Z"))

    def test_name_match_is_case_sensitive(self, abc_tracker):
        with pytest.raises(HabitNotFoundError):
            abc_tracker.find(ByName("b"))

    def test_duplicate_names_resolve_to_first(self, now):
        tracker = Tracker()
        first = tracker.track("run", now)
        tracker.track("run", now + timedelta(days=1))

        assert tracker.find(ByName("run")) is first

    def test_empty_tracker_index_out_of_range(self):
        with pytest.raises(OutOfRangeError):
            Tracker().find(ByIndex(1))


class TestTrackAndReset:
    """Tests for track and reset."""

    def test_track_appends_in_order(self, abc_tracker):
        assert [h.action for h in abc_tracker.habits] == ["A", "B", "C"]

    def test_new_habit_has_zero_days(self, now):
        tracker = Tracker()
        habit = tracker.track("X", now)
        assert habit.days_since(now) == 0

    def test_track_allows_empty_name(self, now):
        tracker = Tracker()
        tracker.track("", now)
        assert tracker.find(ByName("")).action == ""

    def test_days_since_floors_partial_days(self, now):
        habit = Habit(action="X", created_at=now)
        assert habit.days_since(now + timedelta(days=2, hours=23)) == 2

    def test_reset_sets_days_to_zero(self, abc_tracker, now):
        later = now + timedelta(days=10)
        habit = abc_tracker.reset(ByName("C"), later)

        assert habit.days_since(later) == 0
        assert abc_tracker.habits[0].days_since(later) == 10

    def test_reset_is_idempotent(self, abc_tracker, now):
        later = now + timedelta(days=4)
        abc_tracker.reset(ByIndex(1), later)
        first = abc_tracker.to_dict()
        abc_tracker.reset(ByIndex(1), later)

        assert abc_tracker.to_dict() == first


class TestLifeStart:
    """Tests for set_life_start and life_report."""

    def test_end_is_seventy_calendar_years_later(self):
        tracker = Tracker()
        tracker.set_life_start("2000-01-01")

        assert tracker.start == datetime(2000, 1, 1, tzinfo=timezone.utc)
        assert tracker.end == datetime(2070, 1, 1, tzinfo=timezone.utc)

    def test_leap_day_rolls_to_march(self):
        tracker = Tracker()
        tracker.set_life_start("2000-02-29")

        assert tracker.end.date() == date(2070, 3, 1)

    @pytest.mark.parametrize("bad", ["2000-1-1", "01-01-2000", "not-a-date", "2000-13-01", "2001-02-29", ""])
    def test_invalid_date_rejected(self, bad):
        tracker = Tracker()
        with pytest.raises(InvalidDateError):
            tracker.set_life_start(bad)
        assert tracker.start is None

    @pytest.mark.parametrize("late", ["9930-01-01", "9950-06-15", "9999-12-31"])
    def test_end_past_year_9999_rejected(self, late):
        tracker = Tracker()
        with pytest.raises(InvalidDateError, match="past year 9999"):
            tracker.set_life_start(late)
        assert tracker.start is None
        assert tracker.end is None

    def test_latest_representable_start(self):
        tracker = Tracker()
        tracker.set_life_start("9929-12-31")
        assert tracker.end.date() == date(9999, 12, 31)

    def test_life_report_counts(self):
        tracker = Tracker()
        tracker.set_life_start("2000-01-01")
        report = tracker.life_report(tracker.start + timedelta(days=365, hours=5))

        assert report.days_expected == 70 * 365
        assert report.days_since_start == 365
        assert report.days_to_end == 70 * 365 - 365
        assert report.percentage == 1

    def test_life_report_requires_start(self, now):
        with pytest.raises(LifeStartNotSetError):
            Tracker().life_report(now)


class TestJournalWrite:
    """Tests for Journal.write."""

    def test_write_appends_and_stamps(self, now):
        journal = Journal()
        entry = journal.write("first", now)

        assert journal.entries == [entry]
        assert journal.created_at == now
        assert journal.updated_at == now

    def test_created_at_set_only_once(self, now):
        journal = Journal()
        journal.write("first", now)
        later = now + timedelta(hours=3)
        journal.write("second", later)

        assert journal.created_at == now
        assert journal.updated_at == later


class TestJournalListRange:
    """Tests for Journal.list_range."""

    @pytest.fixture
    def journal(self):
        return Journal(entries=[
            Entry("a", local_dt(2024, 1, 1, 8)),
            Entry("b", local_dt(2024, 1, 1, 20)),
            Entry("c", local_dt(2024, 1, 2, 9)),
            Entry("d", local_dt(2024, 1, 3, 23, 59)),
        ])

    def test_range_returns_contiguous_slice(self, journal):
        result = journal.list_range("2024-01-01", "2024-01-02")
        assert [e.text for e in result] == ["a", "b", "c"]

    def test_day_without_entries_is_empty(self, journal):
        assert journal.list_range("2024-01-04", "2024-01-04") == []

    def test_end_defaults_to_start(self, journal):
        result = journal.list_range("2024-01-01")
        assert [e.text for e in result] == ["a", "b"]

    def test_start_defaults_to_today(self, journal):
        result = journal.list_range(today=date(2024, 1, 3))
        assert [e.text for e in result] == ["d"]

    def test_no_entries_today_is_empty(self, journal):
        assert journal.list_range(today=date(2030, 6, 1)) == []

    def test_empty_journal(self):
        assert Journal().list_range() == []

    def test_end_before_all_entries_is_empty(self, journal):
        assert journal.list_range("2023-12-01", "2023-12-31") == []

    def test_reversed_range_is_empty(self, journal):
        assert journal.list_range("2024-01-03", "2024-01-01") == []

    def test_accepts_date_objects(self, journal):
        result = journal.list_range(date(2024, 1, 2), date(2024, 1, 3))
        assert [e.text for e in result] == ["c", "d"]

    def test_gap_day_inside_range(self):
        journal = Journal(entries=[
            Entry("a", local_dt(2024, 1, 1)),
            Entry("b", local_dt(2024, 1, 5)),
        ])
        result = journal.list_range("2024-01-02", "2024-01-10")
        assert [e.text for e in result] == ["b"]

    @pytest.mark.parametrize("bad", ["2024/01/01", "yesterday", "2024-02-30"])
    def test_invalid_dates_rejected(self, journal, bad):
        with pytest.raises(InvalidDateError):
            journal.list_range(bad)
        with pytest.raises(InvalidDateError):
            journal.list_range("2024-01-01", bad)


class TestDocumentRoundTrip:
    """Tests for to_dict/from_dict."""

    def test_tracker_round_trip(self, abc_tracker):
        abc_tracker.set_life_start("1990-06-15")
        restored = Tracker.from_dict(json.loads(json.dumps(abc_tracker.to_dict())))
        assert restored == abc_tracker

    def test_tracker_round_trip_unset_dates(self):
        tracker = Tracker()
        data = tracker.to_dict()

        assert data == {"start": None, "habits": [], "end": None}
        assert Tracker.from_dict(data) == tracker

    def test_tracker_document_keys(self, abc_tracker):
        habit = abc_tracker.to_dict()["habits"][0]
        assert set(habit) == {"action", "createdAt"}

    @pytest.mark.parametrize("data", [{"action": "x", "createdAt": None}, {"action": "x", "createAt": "2024-01-01T10:00:00Z"}])
    def test_habit_requires_created_at(self, data):
        with pytest.raises(StorageError, match="createdAt"):
            Habit.from_dict(data)

    def test_entry_requires_created_at(self):
        with pytest.raises(StorageError, match="createdAt"):
            Entry.from_dict({"text": "x"})

    def test_tracker_accepts_null_habits(self):
        assert Tracker.from_dict({"start": None, "habits": None, "end": None}).habits == []

    def test_journal_round_trip(self, now):
        journal = Journal()
        journal.write("one", now)
        journal.write("two", now + timedelta(minutes=5))

        restored = Journal.from_dict(json.loads(json.dumps(journal.to_dict())))
        assert restored == journal

    def test_journal_round_trip_unset_dates(self):
        journal = Journal()
        data = journal.to_dict()

        assert data == {"entries": [], "updatedAt": None, "createdAt": None}
        assert Journal.from_dict(data) == journal


class TestDateHelpers:
    """Tests for the timestamp and date helpers."""

    def test_parse_timestamp_accepts_zulu(self):
        dt = parse_timestamp("2024-01-01T10:00:00Z")
        assert dt == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_parse_timestamp_none(self):
        assert parse_timestamp(None) is None

    def test_parse_date(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_days_between_negative_for_future(self, now):
        assert days_between(now, now - timedelta(hours=1)) == -1

    def test_add_years_plain(self):
        dt = datetime(2010, 7, 4, tzinfo=timezone.utc)
        assert add_years(dt, 70) == datetime(2080, 7, 4, tzinfo=timezone.utc)
