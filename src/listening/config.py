"""
Settings for the listening history report.

Values come from a local .env file, the Streamlit secrets file used for
Spotify credentials, and plain environment variables.
"""
import os
from dataclasses import dataclass

import toml
from dotenv import load_dotenv

SECRETS_PATH = os.path.join('.streamlit', 'secrets.toml')
DEFAULT_PATTERN = 'Streaming_History_Audio_*.json'


@dataclass(frozen=True)
class Settings:
    data_dir: str = 'data'
    file_pattern: str = DEFAULT_PATTERN
    client_id: str = None
    client_secret: str = None
    replay_show: str = None
    recent_year_start: int = 2021
    recent_year_end: int = 2023
    top_tracks: int = 50
    request_timeout: float = 10
    log_level: str = 'INFO'

    @property
    def has_spotify_credentials(self):
        return bool(self.client_id and self.client_secret)

    @property
    def recent_years(self):
        return list(range(self.recent_year_start, self.recent_year_end + 1))


def _read_secrets(path):
    """Read Spotify credentials from a Streamlit secrets file

    Args:
        path (str): Path to the secrets.toml file

    Returns:
        dict: client_id / client_secret, empty if the file has no [spotify] table
    """
    secrets = toml.load(path)
    spotify = secrets.get('spotify', {})
    return {
        'client_id': spotify.get('client_id'),
        'client_secret': spotify.get('client_secret'),
    }


def load_settings(secrets_path=SECRETS_PATH):
    """Build Settings from .env, the secrets file and environment variables

    Args:
        secrets_path (str): Location of the Streamlit secrets file

    Returns:
        Settings: Immutable settings for one report run
    """
    load_dotenv()

    # Prefer the secrets file, fall back to environment variables
    if os.path.exists(secrets_path):
        credentials = _read_secrets(secrets_path)
    else:
        credentials = {
            'client_id': os.getenv('client_id'),
            'client_secret': os.getenv('client_secret'),
        }

    return Settings(
        data_dir=os.getenv('SPOTIFY_HISTORY_DIR', 'data'),
        file_pattern=os.getenv('SPOTIFY_HISTORY_PATTERN', DEFAULT_PATTERN),
        client_id=credentials['client_id'],
        client_secret=credentials['client_secret'],
        replay_show=os.getenv('REPLAY_SHOW') or None,
        recent_year_start=int(os.getenv('RECENT_YEAR_START', 2021)),
        recent_year_end=int(os.getenv('RECENT_YEAR_END', 2023)),
        top_tracks=int(os.getenv('TOP_TRACKS', 50)),
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', 10)),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    )
