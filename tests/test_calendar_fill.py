"""
Tests for daily calendars.
"""

import datetime

import pandas as pd
import pytest

from listening.aggregate import MS_PER_MINUTE
from listening.calendar_fill import daily_activity, date_range_of, fill_days
from listening.exceptions import InvalidTimestampError, NoListeningDataError


class TestFillDays:

    def test_fills_missing_days(self):
        sums = pd.Series({datetime.date(2021, 1, 1): 30.0, datetime.date(2021, 1, 3): 15.0})

        result = fill_days(sums, datetime.date(2021, 1, 1), datetime.date(2021, 1, 3))

        assert result["date"].tolist() == [
            datetime.date(2021, 1, 1), datetime.date(2021, 1, 2), datetime.date(2021, 1, 3),
        ]
        assert result["total_minutes_played"].tolist() == [30, 0, 15]

    def test_length_matches_range(self):
        start, end = datetime.date(2020, 2, 20), datetime.date(2020, 3, 5)
        sums = pd.Series({datetime.date(2020, 2, 29): 1.0})

        result = fill_days(sums, start, end)

        assert len(result) == (end - start).days + 1
        assert result["date"].is_unique
        gaps = pd.Series(pd.to_datetime(result["date"])).diff().dropna()
        assert (gaps == pd.Timedelta(days=1)).all()

    def test_single_day(self):
        day = datetime.date(2021, 5, 5)

        result = fill_days(pd.Series({day: 2.5}), day, day)

        assert result["total_minutes_played"].tolist() == [2.5]

    def test_days_outside_range_are_left_out(self):
        sums = pd.Series({datetime.date(2020, 12, 31): 10.0, datetime.date(2021, 1, 1): 5.0})

        result = fill_days(sums, datetime.date(2021, 1, 1), datetime.date(2021, 1, 2))

        assert result["total_minutes_played"].tolist() == [5, 0]

    def test_empty_sums(self):
        result = fill_days(pd.Series(dtype="float64"), datetime.date(2021, 1, 1), datetime.date(2021, 1, 2))

        assert result["total_minutes_played"].tolist() == [0, 0]

    def test_reversed_range(self):
        with pytest.raises(ValueError):
            fill_days(pd.Series(dtype="float64"), datetime.date(2021, 1, 2), datetime.date(2021, 1, 1))


class TestDateRange:

    def test_range(self, to_plays, history):
        tracks = to_plays(history).tracks

        assert date_range_of(tracks) == (datetime.date(2020, 6, 1), datetime.date(2022, 3, 10))

    def test_no_data(self, to_plays, make_episode):
        plays = to_plays([make_episode("2021-01-01T00:00:00Z", 1000)])

        with pytest.raises(NoListeningDataError):
            date_range_of(plays.tracks)

    def test_missing_timestamps(self, to_plays, make_track):
        plays = to_plays([make_track(None, 600_000), make_track(None, 300_000)])

        with pytest.raises(InvalidTimestampError):
            date_range_of(plays.tracks)


class TestDailyActivity:

    def test_minutes_round_trip(self, to_plays, history):
        plays = to_plays(history)

        calendars = daily_activity(plays.tracks, plays.episodes)

        music = calendars["music"]
        assert music["total_minutes_played"].sum() == pytest.approx(plays.tracks["ms_played"].sum() / MS_PER_MINUTE)
        podcast = calendars["podcast"]
        assert podcast["total_minutes_played"].sum() == pytest.approx(plays.episodes["ms_played"].sum() / MS_PER_MINUTE)

    def test_shared_range(self, to_plays, history):
        plays = to_plays(history)

        calendars = daily_activity(plays.tracks, plays.episodes)

        assert calendars["music"]["date"].tolist() == calendars["podcast"]["date"].tolist()
        assert calendars["music"]["date"].iloc[0] == datetime.date(2020, 6, 1)
        assert calendars["music"]["date"].iloc[-1] == datetime.date(2022, 3, 10)

    def test_podcasts_before_first_track_fall_outside_shared_range(self, to_plays, make_track, make_episode):
        plays = to_plays([
            make_episode("2020-12-30T00:00:00Z", 600_000),
            make_track("2021-01-01T00:00:00Z", 60_000),
            make_track("2021-01-02T00:00:00Z", 60_000),
        ])

        shared = daily_activity(plays.tracks, plays.episodes)
        independent = daily_activity(plays.tracks, plays.episodes, independent_ranges=True)

        assert shared["podcast"]["total_minutes_played"].sum() == 0
        assert independent["podcast"]["date"].tolist() == [datetime.date(2020, 12, 30)]
        assert independent["podcast"]["total_minutes_played"].tolist() == [10]

    def test_no_episodes(self, to_plays, make_track):
        plays = to_plays([make_track("2021-01-01T00:00:00Z", 60_000)])

        calendars = daily_activity(plays.tracks, plays.episodes)

        assert calendars["podcast"]["total_minutes_played"].tolist() == [0]

    def test_no_tracks(self, to_plays, make_episode):
        plays = to_plays([make_episode("2021-01-01T00:00:00Z", 60_000)])

        with pytest.raises(NoListeningDataError):
            daily_activity(plays.tracks, plays.episodes)
