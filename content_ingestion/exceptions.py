"""
Exceptions raised by the content ingestion pipeline.
"""


class IngestionError(Exception):
    """Base class for ingestion errors."""


class FetchError(IngestionError):
    """A feed could not be fetched (transport error, timeout or HTTP error status)."""


class FeedParseError(IngestionError):
    """A fetched feed could not be decoded."""


class ConfigError(IngestionError):
    """The process configuration is missing or invalid."""


class InvalidScoreError(IngestionError, ValueError):
    """An item like score outside the allowed set."""
