"""
Shared fixtures: export-shaped events and helpers to load them.
"""

import json

import pandas as pd
import pytest

from listening.ingest import FIELD_NAMES, RAW_COLUMNS
from listening.partition import partition_events


def _track(ts, ms, track="Song", artist="A", album="Album", track_id="abc", platform="ios"):
    return {
        "ts": ts,
        "platform": platform,
        "ms_played": ms,
        "master_metadata_track_name": track,
        "master_metadata_album_artist_name": artist,
        "master_metadata_album_album_name": album,
        "spotify_track_uri": f"spotify:track:{track_id}" if track_id else None,
        "episode_name": None,
        "episode_show_name": None,
    }


def _episode(ts, ms, episode="Ep 1", show="S", platform="android"):
    return {
        "ts": ts,
        "platform": platform,
        "ms_played": ms,
        "master_metadata_track_name": None,
        "master_metadata_album_artist_name": None,
        "master_metadata_album_album_name": None,
        "spotify_track_uri": None,
        "episode_name": episode,
        "episode_show_name": show,
    }


@pytest.fixture
def make_track():
    return _track


@pytest.fixture
def make_episode():
    return _episode


@pytest.fixture
def to_raw():
    """Turn export dicts into a RawEvent frame, as load_history would."""
    def build(events):
        return pd.DataFrame(events).rename(columns=FIELD_NAMES).reindex(columns=RAW_COLUMNS)
    return build


@pytest.fixture
def to_plays(to_raw):
    def build(events):
        return partition_events(to_raw(events))
    return build


@pytest.fixture
def write_history(tmp_path):
    """Write lists of events as numbered Streaming_History_Audio files."""
    def write(*documents):
        paths = []
        for i, events in enumerate(documents):
            path = tmp_path / f"Streaming_History_Audio_{2020 + i}_{i}.json"
            path.write_text(json.dumps(events), encoding="utf-8")
            paths.append(str(path))
        return paths
    return write


@pytest.fixture
def history(make_track, make_episode):
    """A small history spanning 2020-2022 with music and podcasts."""
    return [
        make_track("2020-06-01T10:00:00Z", 3_600_000, track="Old Song", artist="B", track_id="old"),
        make_track("2020-06-03T10:00:00Z", 1_800_000, track="Song", artist="A", track_id="abc"),
        make_track("2021-01-01T09:00:00Z", 1_200_000, track="Song", artist="A", track_id="abc"),
        make_track("2021-01-03T09:00:00Z", 600_000, track="Other", artist="C", track_id="xyz"),
        make_track("2022-03-10T20:00:00Z", 2_400_000, track="Song", artist="A", track_id="abc"),
        make_track("2022-03-10T21:00:00Z", 0, track="Skipped", artist="A", track_id="skip"),
        make_episode("2021-01-02T07:00:00Z", 1_000_000, episode="Ep 1", show="S"),
        make_episode("2021-01-02T08:00:00Z", 950_000, episode="Ep 1", show="S"),
        make_episode("2021-01-05T07:00:00Z", 2_000_000, episode="Ep 1", show="S"),
        make_episode("2021-01-06T07:00:00Z", 1_500_000, episode="Ep 2", show="S"),
        make_episode("2022-02-01T07:00:00Z", 600_000, episode="Talk", show="T"),
        {"ts": "2021-05-05T05:00:00Z", "platform": "web", "ms_played": 1000},
    ]
