import sys
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from clients.polar_client import PolarFlowClient, format_query_date
from config import settings
from models.session import ExportFormat, SessionRecord
from utils.errors import AuthError, CatalogError, DownloadError
from fakes import FakeResponse, calendar_event, make_session

BASE = "https://flow.example.test"


def _client(session) -> PolarFlowClient:
    return PolarFlowClient(session=session, base_uri=BASE)


class LoginTest(unittest.TestCase):

    def test_login_posts_form_and_marks_authenticated(self):
        session = make_session(login_status=200)
        client = _client(session)

        client.login("me@example.com", "secret")

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        self.assertEqual(args[0], f"{BASE}/login")
        self.assertEqual(kwargs["data"], {"returnUrl": "/", "email": "me@example.com", "password": "secret"})
        self.assertTrue(client.is_authenticated())

    def test_login_rejected_raises_before_other_calls(self):
        session = make_session(login_status=403)
        client = _client(session)

        with self.assertRaises(AuthError) as ctx:
            client.login("me@example.com", "wrong")

        self.assertEqual(str(ctx.exception), "invalid email or password")
        self.assertFalse(client.is_authenticated())
        session.get.assert_not_called()

    def test_login_transport_failure_carries_message(self):
        session = make_session()
        session.post.side_effect = requests.ConnectionError("name resolution failed")
        client = _client(session)

        with self.assertRaises(AuthError) as ctx:
            client.login("me@example.com", "secret")
        self.assertIn("name resolution failed", str(ctx.exception))

    def test_user_agent_is_set(self):
        session = make_session()
        _client(session)
        self.assertEqual(session.headers["User-Agent"], settings.USER_AGENT)


def test_format_query_date_has_no_padding():
    assert format_query_date(date(2023, 1, 5)) == "5.1.2023"
    assert format_query_date(date(2023, 12, 31)) == "31.12.2023"


def test_catalog_query_parameters():
    session = make_session({"getCalendarEvents": lambda: FakeResponse(json_data=[])})
    client = _client(session)

    assert client.get_session_list(date(2023, 1, 5), date(2023, 12, 31)) == []

    args, kwargs = session.get.call_args
    assert args[0] == f"{BASE}/training/getCalendarEvents"
    assert kwargs["headers"] == {"Accept": "application/json"}
    prepared = requests.Request("GET", args[0], params=kwargs["params"]).prepare()
    assert prepared.url == f"{BASE}/training/getCalendarEvents?start=5.1.2023&end=31.12.2023"


def test_catalog_after_login_returns_records_in_order():
    events = [
        calendar_event(list_item_id=2, when="2023-05-02T08:00:00+02:00"),
        {"type": "NOTE", "url": "/note/9", "datetime": "2023-05-03T00:00:00+02:00"},
        calendar_event(list_item_id=3, when="2023-05-04T08:00:00+02:00"),
    ]
    session = make_session({"getCalendarEvents": lambda: FakeResponse(json_data=events)})
    client = _client(session)
    client.login("me@example.com", "secret")

    records = client.get_session_list(date(2023, 5, 1), date(2023, 5, 31))

    assert [r.record_type for r in records] == ["EXERCISE", "NOTE", "EXERCISE"]
    assert [r.session_id for r in records] == [2, 0, 3]
    assert records[1].duration_millis == 0


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=500),
    FakeResponse(content=b"<html>login</html>"),
    FakeResponse(json_data={"error": "nope"}),
    FakeResponse(json_data=[1, 2]),
    FakeResponse(json_data=[{"type": "EXERCISE", "listItemId": "abc"}]),
])
def test_catalog_failures_raise_catalog_error(response):
    session = make_session({"getCalendarEvents": lambda: response})

    with pytest.raises(CatalogError):
        _client(session).get_session_list(date(2023, 1, 1), date(2023, 1, 2))


def test_catalog_transport_failure_raises_catalog_error():
    session = make_session()
    session.get.side_effect = requests.Timeout("read timed out")

    with pytest.raises(CatalogError, match="read timed out"):
        _client(session).get_session_list(date(2023, 1, 1), date(2023, 1, 2))


def test_open_export_requests_streamed_download():
    payload = FakeResponse(content=b"<TrainingCenterDatabase/>")
    session = make_session({"/api/export/training/": lambda: payload})
    record = SessionRecord(record_type="EXERCISE", session_id=777, start_timestamp="2023-05-01T10:00:00+02:00")

    response = _client(session).open_export(record, ExportFormat.GPX)

    assert response is payload
    args, kwargs = session.get.call_args
    assert args[0] == f"{BASE}/api/export/training/gpx/777"
    assert kwargs["stream"] is True


def test_open_export_non_success_status_raises_download_error():
    payload = FakeResponse(status_code=404)
    session = make_session({"/api/export/training/": lambda: payload})
    record = SessionRecord(record_type="EXERCISE", session_id=5)

    with pytest.raises(DownloadError) as excinfo:
        _client(session).open_export(record, ExportFormat.TCX)

    assert excinfo.value.session_id == 5
    assert excinfo.value.status_code == 404
    assert payload.closed


def test_open_export_transport_failure_raises_download_error():
    session = make_session()
    session.get.side_effect = requests.ConnectionError("reset by peer")

    with pytest.raises(DownloadError, match="reset by peer"):
        _client(session).open_export(SessionRecord(session_id=5), ExportFormat.TCX)


def test_close_releases_session():
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    with _client(session):
        pass
    session.close.assert_called_once()
