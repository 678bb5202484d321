"""
Daily listening calendars with explicit zero-activity days.
"""
import logging

import pandas as pd

from listening.aggregate import daily_minutes, day_of
from listening.exceptions import NoListeningDataError

logger = logging.getLogger(__name__)


def date_range_of(records, domain='track'):
    """First and last listening day of a set of plays

    Raises:
        NoListeningDataError: If there are no plays
    """
    if records.empty:
        raise NoListeningDataError(domain)

    days = day_of(records)
    return days.min(), days.max()


def fill_days(daily_sums, start, end):
    """Expand sparse daily sums into one row per day from start to end

    Args:
        daily_sums (pandas.Series): Minutes played keyed by date
        start (datetime.date): First day, inclusive
        end (datetime.date): Last day, inclusive

    Returns:
        pandas.DataFrame: Columns date, total_minutes_played, one row per day
    """
    if start > end:
        raise ValueError(f"Calendar start {start} is after end {end}")

    all_days = pd.date_range(start, end, freq='D').date

    outside = [day for day in daily_sums.index if day < start or day > end]
    if outside:
        logger.warning(f"{len(outside)} days of activity fall outside {start}..{end} and are left out")

    # Missing days get zero minutes
    filled = daily_sums.reindex(all_days, fill_value=0).astype('float64')
    return pd.DataFrame({'date': all_days, 'total_minutes_played': filled.values})


def daily_activity(tracks, episodes, independent_ranges=False):
    """Daily minutes for music and podcasts over a gap-free calendar

    Both calendars use the date range of the track plays unless
    independent_ranges is set, in which case each uses its own.

    Returns:
        dict: 'music' and 'podcast' DailyActivity frames
    """
    start, end = date_range_of(tracks, 'track')

    calendars = {'music': fill_days(daily_minutes(tracks), start, end)}

    if independent_ranges:
        if episodes.empty:
            calendars['podcast'] = pd.DataFrame(columns=['date', 'total_minutes_played'])
        else:
            ep_start, ep_end = date_range_of(episodes, 'episode')
            calendars['podcast'] = fill_days(daily_minutes(episodes), ep_start, ep_end)
    else:
        calendars['podcast'] = fill_days(daily_minutes(episodes), start, end)

    logger.info(f"Filled calendars from {start} to {end} ({len(calendars['music'])} days)")
    return calendars
