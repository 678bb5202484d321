"""
Exceptions raised by the listening history pipeline.
"""


class ListeningHistoryError(Exception):
    """Base exception for the report pipeline."""


class NoListeningDataError(ListeningHistoryError):
    """Raised when an operation needs at least one play to work with."""

    def __init__(self, domain='track', purpose='derive a date range from'):
        self.domain = domain
        super().__init__(f"No {domain} plays to {purpose}")


class InvalidTimestampError(ListeningHistoryError, ValueError):
    """Raised when a play carries a timestamp that is not ISO-8601."""


class EnrichmentError(ListeningHistoryError):
    """Raised when the Spotify metadata lookup fails."""
