"""
Split raw events into track plays and episode plays.
"""
import logging
from dataclasses import dataclass

import pandas as pd

logger = logging.getLogger(__name__)

TRACK_URI_PREFIX = 'spotify:track:'

TRACK_COLUMNS = ['timestamp', 'ms_played', 'track_name', 'album_name', 'artist_name', 'track_id']
EPISODE_COLUMNS = ['timestamp', 'platform', 'ms_played', 'episode_name', 'show_name']


@dataclass(frozen=True)
class PartitionResult:
    tracks: pd.DataFrame
    episodes: pd.DataFrame
    dropped: int


def extract_track_id(uri):
    """Strip the spotify:track: prefix from a track URI

    Identifiers without the prefix are returned unchanged.
    """
    if not isinstance(uri, str):
        return None
    return uri.replace(TRACK_URI_PREFIX, '')


def partition_events(raw):
    """Classify raw events as track plays or episode plays

    A track play has no episode name, a track name and a non-zero duration.
    An episode play is any event with an episode name; those are not
    filtered further. Everything else is dropped.

    Args:
        raw (pandas.DataFrame): Events as returned by ingest.load_history

    Returns:
        PartitionResult: Track plays, episode plays and the dropped count
    """
    ms_played = pd.to_numeric(raw['ms_played'], errors='coerce').fillna(0)

    is_episode = raw['episode_name'].notna()
    is_track = ~is_episode & raw['track_name'].notna() & (ms_played > 0)

    tracks = raw.loc[is_track].assign(
        ms_played=ms_played[is_track].astype('int64'),
        track_id=raw.loc[is_track, 'track_uri'].map(extract_track_id),
    )
    tracks = tracks.reindex(columns=TRACK_COLUMNS).reset_index(drop=True)

    episodes = raw.loc[is_episode].reindex(columns=EPISODE_COLUMNS).reset_index(drop=True)

    dropped = len(raw) - len(tracks) - len(episodes)
    logger.info(f"Partitioned {len(raw)} events: {len(tracks)} track plays, "
                f"{len(episodes)} episode plays, {dropped} dropped")

    return PartitionResult(tracks=tracks, episodes=episodes, dropped=dropped)
