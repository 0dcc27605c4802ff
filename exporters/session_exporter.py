"""Streams Polar Flow training sessions into an export sink."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import requests

from clients.polar_client import PolarFlowClient
from config.settings import DOWNLOAD_CHUNK_SIZE, ON_DOWNLOAD_ERROR, ON_ERROR_ABORT, ON_ERROR_CHOICES
from models.session import ExportFormat, SessionRecord
from sinks.base import ExportSink
from utils.errors import DownloadError, SinkError, TimestampParseError
from utils.naming import derive_file_name

logger = logging.getLogger(__name__)

# Failures confined to a single session; anything else ends the run
SESSION_ERRORS = (DownloadError, SinkError, TimestampParseError)


@dataclass
class ExportSummary:
    """Outcome of an export run."""

    exported: List[str] = field(default_factory=list)
    failed: List[Tuple[int, str]] = field(default_factory=list)
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


class SessionExporter:
    """Downloads sessions one at a time into a single sink."""

    def __init__(self, client: PolarFlowClient, sink: ExportSink, fmt: ExportFormat,
                 on_error: str = ON_DOWNLOAD_ERROR, chunk_size: int = DOWNLOAD_CHUNK_SIZE):
        """Initialize the exporter.

        Args:
            client: Authenticated Polar Flow client
            sink: Destination for the exported files
            fmt: Export format applied to every session
            on_error: 'abort' to stop at the first failed session, 'continue'
                to log it and carry on
            chunk_size: Bytes read from the response per write
        """
        if on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got '{on_error}'")
        self.client = client
        self.sink = sink
        self.fmt = fmt
        self.on_error = on_error
        self.chunk_size = chunk_size

    def export_session(self, record: SessionRecord) -> str:
        """Download one session and write it to the sink.

        Returns:
            Name of the written entry

        Raises:
            TimestampParseError: If the session start time cannot be parsed
            DownloadError: If the export request or body transfer fails
            SinkError: If the destination cannot be written
        """
        name = derive_file_name(record, self.fmt)
        response = self.client.open_export(record, self.fmt)
        try:
            with self.sink.begin_entry(name) as handle:
                size = self._copy_body(record, response, handle)
        finally:
            response.close()
        logger.info(f"Exported session {record.session_id} to {name} ({size} bytes)")
        return name

    def _copy_body(self, record: SessionRecord, response: requests.Response, handle) -> int:
        size = 0
        chunks = response.iter_content(chunk_size=self.chunk_size)
        while True:
            try:
                chunk = next(chunks, None)
            except requests.RequestException as e:
                raise DownloadError(f"download of session {record.session_id} interrupted: {e}",
                                    session_id=record.session_id) from e
            if chunk is None:
                return size
            if chunk:
                handle.write(chunk)
                size += len(chunk)

    def export_all(self, records: Iterable[SessionRecord]) -> ExportSummary:
        """Export every exercise session from a catalog listing.

        Non-exercise calendar entries are skipped without touching the network.

        Raises:
            DownloadError, SinkError, TimestampParseError: On the first failed
                session when the policy is 'abort'
        """
        summary = ExportSummary()
        for record in records:
            if not record.is_exercise:
                summary.skipped += 1
                logger.debug(f"Skipping calendar entry of type '{record.record_type}'")
                continue

            logger.info(
                f"exporting session from {record.start_timestamp}, duration: {record.duration_hms}, "
                f"calories: {record.calories} kcal, distance: {record.distance_km:.2f} km"
            )
            logger.debug(f"{record!r}")
            try:
                summary.exported.append(self.export_session(record))
            except SESSION_ERRORS as e:
                if self.on_error == ON_ERROR_ABORT:
                    raise
                logger.error(f"Session {record.session_id} not exported: {e}")
                summary.failed.append((record.session_id, str(e)))

        logger.info(
            f"Exported {len(summary.exported)} sessions to {self.sink.location} "
            f"({len(summary.failed)} failed, {summary.skipped} non-exercise entries skipped)"
        )
        return summary
