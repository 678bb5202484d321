"""
Load Spotify extended streaming history exports into a single DataFrame.
"""
import glob
import json
import logging
import os

import pandas as pd

logger = logging.getLogger(__name__)

# Export field name -> RawEvent column
FIELD_NAMES = {
    'ts': 'timestamp',
    'platform': 'platform',
    'ms_played': 'ms_played',
    'master_metadata_track_name': 'track_name',
    'master_metadata_album_album_name': 'album_name',
    'master_metadata_album_artist_name': 'artist_name',
    'spotify_track_uri': 'track_uri',
    'episode_name': 'episode_name',
    'episode_show_name': 'show_name',
}
RAW_COLUMNS = list(FIELD_NAMES.values())


def find_history_files(directory, pattern='Streaming_History_Audio_*.json'):
    """Find export files in a directory, in a stable order

    Args:
        directory (str): Folder holding the unzipped export
        pattern (str): Glob pattern for the history documents

    Returns:
        list: Sorted list of file paths
    """
    files = sorted(glob.glob(os.path.join(directory, pattern)))
    logger.info(f"Found {len(files)} history files in {directory}")
    return files


def load_json_file(file_path):
    """Load one history document

    Args:
        file_path (str): Path to a JSON file containing an array of events

    Returns:
        pandas.DataFrame: One row per event, export field names as columns
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        logger.warning(f"Skipping {os.path.basename(file_path)}: expected a list of records, got {type(data).__name__}")
        return pd.DataFrame()

    df = pd.DataFrame(data)
    logger.info(f"Loaded {len(df)} records from {os.path.basename(file_path)}")
    return df


def load_history(paths):
    """Concatenate history documents into one RawEvent frame

    Args:
        paths (list): JSON file paths, read in the given order

    Returns:
        pandas.DataFrame: Raw events with every RawEvent column present
    """
    frames = [load_json_file(path) for path in paths]
    frames = [frame for frame in frames if not frame.empty]

    if not frames:
        logger.warning("No listening events loaded")
        return pd.DataFrame(columns=RAW_COLUMNS)

    combined = pd.concat(frames, ignore_index=True)

    # Absent fields become null columns, unknown fields are dropped
    raw = combined.rename(columns=FIELD_NAMES).reindex(columns=RAW_COLUMNS)
    logger.info(f"Combined {len(raw)} raw events from {len(frames)} files")
    return raw
