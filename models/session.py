"""Data models for Polar Flow calendar events."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from config.settings import EXERCISE_RECORD_TYPE


class ExportFormat(Enum):
    """Training session export format.

    The value doubles as the download URL token and the file extension.
    """

    TCX = "tcx"
    GPX = "gpx"
    CSV = "csv"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "ExportFormat":
        """Parse a format token, ignoring case.

        Raises:
            ValueError: If the token is not a known format
        """
        try:
            return cls((text or "").strip().lower())
        except ValueError:
            raise ValueError(f"unknown format '{text}'") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SessionRecord:
    """One calendar entry returned by the catalog query."""

    record_type: str = ""
    session_id: int = 0
    start_timestamp: str = ""
    duration_millis: int = 0
    calories: int = 0
    distance_meters: float = 0.0
    timestamp: int = 0
    url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Build a record from a calendar event JSON object.

        Absent or null fields fall back to zero or an empty string; most
        non-exercise entries legitimately omit duration, calories and distance.
        """
        return cls(
            record_type=str(data.get("type") or ""),
            session_id=int(data.get("listItemId") or 0),
            start_timestamp=str(data.get("datetime") or ""),
            duration_millis=int(data.get("duration") or 0),
            calories=int(data.get("calories") or 0),
            distance_meters=float(data.get("distance") or 0.0),
            timestamp=int(data.get("timestamp") or 0),
            url=str(data.get("url") or ""),
        )

    @property
    def is_exercise(self) -> bool:
        return self.record_type == EXERCISE_RECORD_TYPE

    @property
    def duration_hms(self) -> str:
        """Duration formatted as HH:MM:SS."""
        hours = self.duration_millis // 3600000
        minutes = self.duration_millis % 3600000 // 60000
        seconds = self.duration_millis % 60000 // 1000
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0
