"""Data models for Polar Flow Exporter."""

from .session import ExportFormat, SessionRecord

__all__ = [
    'ExportFormat',
    'SessionRecord',
]
