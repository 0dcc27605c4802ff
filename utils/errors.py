"""Error types raised by the export pipeline."""

from typing import Optional


class ExporterError(Exception):
    """Base error carrying a human-readable cause."""

    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return self.cause


class AuthError(ExporterError):
    """Login was rejected or could not be performed."""


class CatalogError(ExporterError):
    """The calendar event listing could not be fetched or decoded."""


class DownloadError(ExporterError):
    """A session export request failed."""

    def __init__(self, cause: str, session_id: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(cause)
        self.session_id = session_id
        self.status_code = status_code


class SinkError(ExporterError):
    """Writing to the export destination failed."""


class TimestampParseError(ExporterError):
    """A session timestamp is not a valid RFC 3339 value."""
