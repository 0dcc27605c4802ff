"""Polar Flow client for listing and downloading training sessions."""

import logging
from datetime import date
from typing import List, Optional

import requests

from config.settings import BASE_URI, REQUEST_TIMEOUT, USER_AGENT
from models.session import ExportFormat, SessionRecord
from utils.errors import AuthError, CatalogError, DownloadError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
CALENDAR_EVENTS_PATH = "/training/getCalendarEvents"
EXPORT_PATH = "/api/export/training/{fmt}/{session_id}"


def format_query_date(value: date) -> str:
    """Format a date as day.month.year without zero padding (e.g. 5.1.2023)."""
    return f"{value.day}.{value.month}.{value.year}"


class PolarFlowClient:
    """Authenticated HTTP context shared by every call of an export run.

    Wraps a single ``requests.Session``; the cookie set by :meth:`login` is
    what authorizes the catalog query and every download afterwards.
    """

    def __init__(self, session: Optional[requests.Session] = None, base_uri: str = BASE_URI,
                 timeout: Optional[float] = REQUEST_TIMEOUT):
        """Initialize Polar Flow client.

        Args:
            session: HTTP session to use (a new one is created by default)
            base_uri: Service origin
            timeout: Per-request timeout in seconds, None for the transport default
        """
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self.base_uri = base_uri.rstrip("/")
        self.timeout = timeout
        self._authenticated = False

    def __enter__(self) -> "PolarFlowClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.session.close()

    def url(self, path: str) -> str:
        return f"{self.base_uri}{path}"

    def login(self, email: str, password: str) -> None:
        """Log in to the Polar Flow web gateway.

        Args:
            email: Polar Flow registration email
            password: Polar Flow registration password

        Raises:
            AuthError: If the request fails or the service does not answer 200
        """
        form = {"returnUrl": "/", "email": email, "password": password}
        try:
            response = self.session.post(self.url(LOGIN_PATH), data=form, timeout=self.timeout)
        except requests.RequestException as e:
            self._authenticated = False
            raise AuthError(str(e)) from e

        if response.status_code != 200:
            self._authenticated = False
            logger.debug(f"Login rejected with status {response.status_code}")
            raise AuthError("invalid email or password")

        self._authenticated = True
        logger.info(f"Successfully authenticated with Polar Flow as {email}")

    def is_authenticated(self) -> bool:
        """Check if login succeeded on this client."""
        return self._authenticated

    def get_session_list(self, start_date: date, end_date: date) -> List[SessionRecord]:
        """Get the calendar events recorded between two dates.

        Args:
            start_date: First day of the window
            end_date: Last day of the window

        Returns:
            Session records in the order the service returned them

        Raises:
            CatalogError: If the listing cannot be fetched or decoded
        """
        params = {"start": format_query_date(start_date), "end": format_query_date(end_date)}
        logger.debug(f"Requesting calendar events {params['start']} - {params['end']}")
        try:
            response = self.session.get(
                self.url(CALENDAR_EVENTS_PATH),
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise CatalogError(f"failed to fetch calendar events: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogError(f"calendar events response is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise CatalogError(f"calendar events response is not a list (got {type(payload).__name__})")

        records = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise CatalogError(f"calendar event #{index} is not an object")
            try:
                records.append(SessionRecord.from_dict(item))
            except (TypeError, ValueError) as e:
                raise CatalogError(f"calendar event #{index} is malformed: {e}") from e

        logger.info(f"Found {len(records)} calendar events")
        return records

    def open_export(self, record: SessionRecord, fmt: ExportFormat) -> requests.Response:
        """Request a session export without reading its body.

        The caller owns the returned response and must close it; the body is
        meant to be consumed with ``iter_content``.

        Raises:
            DownloadError: On transport failure or a non-success status
        """
        url = self.url(EXPORT_PATH.format(fmt=fmt.value, session_id=record.session_id))
        logger.debug(f"Downloading {url}")
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise DownloadError(f"failed to download session {record.session_id}: {e}",
                                session_id=record.session_id) from e

        if not 200 <= response.status_code < 300:
            response.close()
            raise DownloadError(
                f"failed to download session {record.session_id}: HTTP {response.status_code}",
                session_id=record.session_id,
                status_code=response.status_code,
            )
        return response
