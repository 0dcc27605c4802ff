"""Export destinations for downloaded sessions."""

from .base import ExportSink
from .directory import DirectorySink
from .archive import ArchiveSink

__all__ = ['ExportSink', 'DirectorySink', 'ArchiveSink']
