"""
Compose the pipeline stages into one listening report.
"""
import logging
from dataclasses import dataclass

import pandas as pd

from listening import aggregate
from listening.calendar_fill import daily_activity
from listening.config import load_settings
from listening.enrichment import enrich_tracks, lookup_from_settings
from listening.exceptions import NoListeningDataError
from listening.ingest import find_history_files, load_history
from listening.partition import partition_events

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListeningReport:
    summary: dict
    dropped_events: int
    hours_by_year: pd.DataFrame
    top_artists_recent: pd.DataFrame
    top_artists_earlier: pd.DataFrame
    artist_ranks: pd.DataFrame
    top_tracks: pd.DataFrame
    top_shows: pd.DataFrame
    replay_show: str
    replayed_episodes: pd.DataFrame
    daily: dict


def pick_replay_show(episodes, configured=None):
    """Show to count replays for: the configured one, else the most listened"""
    if configured:
        return configured
    shows = aggregate.top_shows(episodes, n=1, keep_ties=False)
    if shows.empty:
        return None
    return shows['show_name'].iloc[0]


def daily_calendars(tracks, episodes):
    """Daily activity calendars, empty when there are no track plays to span"""
    try:
        return daily_activity(tracks, episodes)
    except NoListeningDataError as e:
        logger.warning(f"Skipping daily activity: {e}")
        empty = pd.DataFrame(columns=['date', 'total_minutes_played'])
        return {'music': empty, 'podcast': empty.copy()}


def build_report(paths, settings, lookup=None):
    """Run every stage over the given history files

    Args:
        paths (list): Ordered JSON history file paths
        settings (Settings): Report settings
        lookup (callable, optional): Track metadata lookup, no enrichment if None

    Returns:
        ListeningReport: All tables for the dashboard

    Raises:
        NoListeningDataError: If there are no track or episode plays at all
        InvalidTimestampError: If a kept play has a missing or malformed timestamp
    """
    raw = load_history(paths)
    partitioned = partition_events(raw)
    tracks, episodes = partitioned.tracks, partitioned.episodes
    if tracks.empty and episodes.empty:
        raise NoListeningDataError('listening', 'report on')

    recent_years = settings.recent_years
    earlier_years = [
        year for year in aggregate.year_of(tracks).unique()
        if year < settings.recent_year_start
    ] if not tracks.empty else []

    ranks = aggregate.rank_artists_by_year(tracks)

    top_tracks = aggregate.top_tracks_by_play_count(tracks, n=settings.top_tracks)
    top_tracks = enrich_tracks(top_tracks, lookup)

    replay_show = pick_replay_show(episodes, settings.replay_show)
    if replay_show:
        replayed = aggregate.count_replays(episodes, replay_show)
    else:
        replayed = pd.DataFrame(columns=['episode_name', 'replays'])

    report = ListeningReport(
        summary=aggregate.listening_summary(tracks, episodes),
        dropped_events=partitioned.dropped,
        hours_by_year=aggregate.hours_by_year(tracks, episodes),
        top_artists_recent=aggregate.top_artists(tracks, n=10, years=recent_years),
        top_artists_earlier=aggregate.top_artists(tracks, n=10, years=earlier_years),
        artist_ranks=ranks,
        top_tracks=top_tracks,
        top_shows=aggregate.top_shows(episodes, n=10),
        replay_show=replay_show,
        replayed_episodes=replayed,
        daily=daily_calendars(tracks, episodes),
    )
    logger.info(f"Report built from {len(raw)} events")
    return report


def build_report_from_settings(settings):
    """Locate the history files and metadata lookup from settings, then build"""
    paths = find_history_files(settings.data_dir, settings.file_pattern)
    return build_report(paths, settings, lookup=lookup_from_settings(settings))


if __name__ == "__main__":
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    report = build_report_from_settings(settings)
    print(report.hours_by_year)
    print(report.top_artists_recent)
    print(report.top_tracks.head(10))
    print(report.replayed_episodes)
