"""Common interface for export destinations."""

from abc import ABC, abstractmethod
from typing import BinaryIO, ContextManager, List


class ExportSink(ABC):
    """Destination accepting named byte streams.

    There are exactly two implementations: :class:`~sinks.directory.DirectorySink`
    and :class:`~sinks.archive.ArchiveSink`.
    """

    def __init__(self):
        self._entries: List[str] = []

    @property
    def entries(self) -> List[str]:
        """Names of the entries written so far, in order."""
        return list(self._entries)

    @abstractmethod
    def begin_entry(self, name: str) -> ContextManager[BinaryIO]:
        """Open a new entry for writing.

        Args:
            name: Entry name (file name or archive member name)

        Returns:
            Context manager yielding a binary writable handle; the entry is
            finalized when the block exits

        Raises:
            SinkError: If the entry cannot be created or written
        """

    @abstractmethod
    def close(self):
        """Finalize the destination."""

    @abstractmethod
    def discard(self):
        """Close the destination and remove everything written to it."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where output goes."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
