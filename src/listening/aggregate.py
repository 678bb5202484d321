"""
Grouping and ranking over partitioned plays.

Every function takes the frames produced by partition.partition_events and
returns a new frame; inputs are never modified.
"""
import logging

import pandas as pd

from listening.exceptions import InvalidTimestampError

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000
REPLAY_MIN_MS = 900_000  # 15 minutes


def parse_timestamps(timestamps):
    """Parse ISO-8601 UTC timestamp strings

    Args:
        timestamps (pandas.Series): Raw timestamp strings

    Returns:
        pandas.Series: tz-aware UTC datetimes

    Raises:
        InvalidTimestampError: If any value is missing or cannot be parsed
    """
    try:
        parsed = pd.to_datetime(timestamps, utc=True, format='ISO8601')
    except (ValueError, TypeError) as e:
        raise InvalidTimestampError(f"Unparseable timestamp in listening history: {e}") from e

    missing = int(parsed.isna().sum())
    if missing:
        raise InvalidTimestampError(f"{missing} plays in listening history have no timestamp")
    return parsed


def year_of(records):
    return parse_timestamps(records['timestamp']).dt.year


def day_of(records):
    return parse_timestamps(records['timestamp']).dt.date


def aggregate(records, key_fn, measure_fn, how='sum'):
    """Group records by a derived key and accumulate a derived measure

    Args:
        records (pandas.DataFrame): Plays to group
        key_fn (callable): records -> Series (or list of Series) of group keys
        measure_fn (callable): records -> Series of values to accumulate
        how (str): pandas aggregation name, e.g. 'sum' or 'count'

    Returns:
        pandas.Series: Accumulated measure indexed by key
    """
    if records.empty:
        return pd.Series(dtype='float64')

    keys = key_fn(records)
    measure = measure_fn(records)
    return measure.groupby(keys).agg(how)


def hours(records):
    return records['ms_played'].astype('float64') / MS_PER_HOUR


def top_n(frame, column, n, tiebreak=(), keep_ties=True):
    """Select the n rows with the highest value in a column

    Rows are ordered by the column descending, then by the tiebreak columns
    ascending. With keep_ties every row tied with the n-th value is kept, so
    the result can be longer than n.

    Args:
        frame (pandas.DataFrame): Rows to select from
        column (str): Measure to rank by
        n (int): Number of rows wanted
        tiebreak (tuple): Columns ordering rows with equal measure
        keep_ties (bool): Keep rows tied at the boundary instead of cutting at n

    Returns:
        pandas.DataFrame: Selected rows, best first
    """
    tiebreak = list(tiebreak)
    ordered = frame.sort_values(
        by=[column] + tiebreak,
        ascending=[False] + [True] * len(tiebreak),
        kind='mergesort',
    ).reset_index(drop=True)

    if n <= 0:
        return ordered.iloc[0:0]
    if not keep_ties or len(ordered) <= n:
        return ordered.head(n)

    threshold = ordered[column].iloc[n - 1]
    return ordered[ordered[column] >= threshold].reset_index(drop=True)


def hours_by_year(tracks, episodes):
    """Hours listened per calendar year, split into music and podcasts

    Returns:
        pandas.DataFrame: Columns year, category, hours
    """
    frames = []
    for category, records in (('music', tracks), ('podcast', episodes)):
        per_year = aggregate(records, year_of, hours)
        frames.append(pd.DataFrame({
            'year': per_year.index.astype('int64'),
            'category': category,
            'hours': per_year.values,
        }))

    result = pd.concat(frames, ignore_index=True)
    return result.sort_values(['year', 'category']).reset_index(drop=True)


def hours_by_artist(tracks, years=None):
    """Hours listened per artist, optionally restricted to some years

    Args:
        tracks (pandas.DataFrame): Track plays
        years (iterable, optional): Only count plays from these years

    Returns:
        pandas.DataFrame: Columns artist, hours, most listened first
    """
    if years is not None and not tracks.empty:
        tracks = tracks[year_of(tracks).isin(list(years))]

    per_artist = aggregate(tracks, lambda r: r['artist_name'], hours)
    result = pd.DataFrame({'artist': per_artist.index, 'hours': per_artist.values})
    return result.sort_values(['hours', 'artist'], ascending=[False, True]).reset_index(drop=True)


def top_artists(tracks, n=10, years=None, keep_ties=True):
    return top_n(hours_by_artist(tracks, years), 'hours', n, tiebreak=('artist',), keep_ties=keep_ties)


def rank_artists_by_year(tracks):
    """Rank artists within each year by hours played

    Ties on hours are ordered by artist name, so each year gets the ranks
    1..k for its k artists with no gaps or repeats.

    Returns:
        pandas.DataFrame: Columns year, artist, hours_played, rank
    """
    columns = ['year', 'artist', 'hours_played', 'rank']
    if tracks.empty:
        return pd.DataFrame(columns=columns)

    per_year = aggregate(tracks, lambda r: [year_of(r), r['artist_name']], hours)
    per_year.index.names = ['year', 'artist']
    ranked = per_year.rename('hours_played').reset_index()

    ranked = ranked.sort_values(
        ['year', 'hours_played', 'artist'],
        ascending=[True, False, True],
    ).reset_index(drop=True)
    ranked['rank'] = ranked.groupby('year').cumcount() + 1
    ranked['year'] = ranked['year'].astype('int64')
    return ranked[columns]


def artist_rank_history(ranks, artists):
    """Ranks of the given artists across years, for plotting rank over time"""
    return ranks[ranks['artist'].isin(list(artists))].reset_index(drop=True)


def top_tracks_by_play_count(tracks, n=50, keep_ties=True):
    """Most played tracks

    Returns:
        pandas.DataFrame: Columns track_id, track_name, artist, play_count
    """
    columns = ['track_id', 'track_name', 'artist', 'play_count']
    if tracks.empty:
        return pd.DataFrame(columns=columns)

    grouped = tracks.groupby('track_id', sort=False)
    counts = pd.DataFrame({
        'track_name': grouped['track_name'].first(),
        'artist': grouped['artist_name'].first(),
        'play_count': grouped.size(),
    }).rename_axis('track_id').reset_index()

    selected = top_n(counts, 'play_count', n, tiebreak=('track_name', 'track_id'), keep_ties=keep_ties)
    return selected[columns]


def top_shows(episodes, n=10, keep_ties=True):
    """Podcasts by hours listened

    Returns:
        pandas.DataFrame: Columns show_name, hours, episodes_played
    """
    columns = ['show_name', 'hours', 'episodes_played']
    if episodes.empty:
        return pd.DataFrame(columns=columns)

    per_show = aggregate(episodes, lambda r: r['show_name'], hours)
    plays = aggregate(episodes, lambda r: r['show_name'], lambda r: r['episode_name'], how='nunique')
    shows = pd.DataFrame({
        'show_name': per_show.index,
        'hours': per_show.values,
        'episodes_played': plays.reindex(per_show.index).values,
    })
    return top_n(shows, 'hours', n, tiebreak=('show_name',), keep_ties=keep_ties)[columns]


def count_replays(episodes, show, min_ms=REPLAY_MIN_MS, n=5, keep_ties=True):
    """Most replayed episodes of one show

    Only plays of at least min_ms count, and several plays of the same
    episode on the same day count once.

    Args:
        episodes (pandas.DataFrame): Episode plays
        show (str): Show name to look at
        min_ms (int): Minimum play length in milliseconds
        n (int): Number of episodes to return

    Returns:
        pandas.DataFrame: Columns episode_name, replays
    """
    columns = ['episode_name', 'replays']
    ms_played = pd.to_numeric(episodes['ms_played'], errors='coerce')
    plays = episodes[(episodes['show_name'] == show) & (ms_played >= min_ms)]
    if plays.empty:
        return pd.DataFrame(columns=columns)

    # One play per episode per day
    days = plays.assign(day=day_of(plays))[['episode_name', 'day']].drop_duplicates()

    counts = days.groupby('episode_name').size()
    replays = pd.DataFrame({'episode_name': counts.index, 'replays': counts.values})
    logger.info(f"Counted replays for {len(replays)} episodes of {show}")
    return top_n(replays, 'replays', n, tiebreak=('episode_name',), keep_ties=keep_ties)[columns]


def daily_minutes(records):
    """Minutes played per calendar day (UTC)"""
    minutes = aggregate(records, day_of, lambda r: r['ms_played'].astype('float64') / MS_PER_MINUTE)
    return minutes.rename_axis('date')


def listening_summary(tracks, episodes):
    """Headline numbers for the whole history

    Returns:
        dict: Totals, distinct counts and the first/last listening day
    """
    summary = {
        'music_hours': float(hours(tracks).sum()) if not tracks.empty else 0.0,
        'podcast_hours': float(hours(episodes).sum()) if not episodes.empty else 0.0,
        'track_plays': len(tracks),
        'episode_plays': len(episodes),
        'distinct_artists': int(tracks['artist_name'].nunique()),
        'distinct_tracks': int(tracks['track_id'].nunique()),
        'distinct_shows': int(episodes['show_name'].nunique()),
        'first_day': None,
        'last_day': None,
    }

    days = [day_of(frame) for frame in (tracks, episodes) if not frame.empty]
    if days:
        days = pd.concat(days)
        summary['first_day'] = days.min()
        summary['last_day'] = days.max()

    return summary
