"""Session export orchestration."""

from .session_exporter import ExportSummary, SessionExporter

__all__ = ['ExportSummary', 'SessionExporter']
