"""
Track metadata from the Spotify Web API, joined onto local aggregates.
"""
import logging

import pandas as pd
import requests
import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from listening.exceptions import EnrichmentError

logger = logging.getLogger(__name__)

API_BATCH_SIZE = 50  # Spotify API limit for /tracks


class SpotifyMetadataClient:
    def __init__(self, client_id=None, client_secret=None, timeout=10, retries=1, client=None):
        """Initialize the metadata client

        Args:
            client_id (str): Spotify application client ID
            client_secret (str): Spotify application client secret
            timeout (float): Seconds to wait for each HTTP request
            retries (int): Retries for failed or rate limited requests
            client (spotipy.Spotify, optional): Pre-built client, used as is
        """
        if client is not None:
            self.sp = client
            return

        if not client_id or not client_secret:
            raise ValueError("Spotify client_id and client_secret are required")

        # Client credentials flow, spotipy handles the token exchange
        auth_manager = SpotifyClientCredentials(
            client_id=client_id,
            client_secret=client_secret,
            requests_timeout=timeout,
        )
        self.sp = spotipy.Spotify(
            auth_manager=auth_manager,
            requests_timeout=timeout,
            retries=retries,
            status_retries=retries,
        )

    def lookup(self, track_ids):
        """Fetch popularity and explicit flags for track IDs

        Args:
            track_ids (list): Spotify track IDs

        Returns:
            dict: track_id -> {'popularity': int, 'explicit': bool}, unknown IDs are absent

        Raises:
            EnrichmentError: If the API or the token exchange fails
        """
        track_ids = [track_id for track_id in track_ids if track_id]
        attributes = {}

        for start in range(0, len(track_ids), API_BATCH_SIZE):
            batch = track_ids[start:start + API_BATCH_SIZE]
            try:
                results = self.sp.tracks(batch)
            except (SpotifyException, SpotifyOauthError, requests.exceptions.RequestException) as e:
                raise EnrichmentError(f"Spotify track lookup failed: {e}") from e

            for item in results.get('tracks') or []:
                # Unknown IDs come back as null entries
                if not item or not item.get('id'):
                    continue
                attributes[item['id']] = {
                    'popularity': item.get('popularity'),
                    'explicit': item.get('explicit'),
                }

            logger.info(f"Fetched metadata batch {start // API_BATCH_SIZE + 1}: "
                        f"{len(batch)} requested, {len(attributes)} matched so far")

        return attributes


def lookup_from_settings(settings):
    """Build a lookup callable from settings, or None without credentials"""
    if not settings.has_spotify_credentials:
        logger.info("No Spotify credentials configured, track enrichment disabled")
        return None

    client = SpotifyMetadataClient(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        timeout=settings.request_timeout,
    )
    return client.lookup


def _unenriched(top_tracks):
    return top_tracks.assign(
        popularity=pd.array([None] * len(top_tracks), dtype='Int64'),
        explicit=pd.array([None] * len(top_tracks), dtype='boolean'),
    )


def enrich_tracks(top_tracks, lookup):
    """Left join Spotify metadata onto the most played tracks

    Tracks without a match keep null popularity and explicit values. When
    lookup is None or fails, every row is returned unenriched.

    Args:
        top_tracks (pandas.DataFrame): Output of aggregate.top_tracks_by_play_count
        lookup (callable): track_ids -> {track_id: attributes}

    Returns:
        pandas.DataFrame: top_tracks plus popularity and explicit columns
    """
    if lookup is None or top_tracks.empty:
        return _unenriched(top_tracks)

    try:
        attributes = lookup(top_tracks['track_id'].dropna().tolist())
    except EnrichmentError as e:
        logger.warning(f"Skipping track enrichment: {e}")
        return _unenriched(top_tracks)

    metadata = pd.DataFrame(
        [(track_id, attrs.get('popularity'), attrs.get('explicit')) for track_id, attrs in attributes.items()],
        columns=['track_id', 'popularity', 'explicit'],
    )
    metadata['popularity'] = metadata['popularity'].astype('Int64')
    metadata['explicit'] = metadata['explicit'].astype('boolean')

    enriched = top_tracks.merge(metadata, on='track_id', how='left')
    missing = int(enriched['popularity'].isna().sum())
    if missing:
        logger.info(f"{missing} of {len(enriched)} tracks have no Spotify metadata")
    return enriched
