import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import quote

import pytest

from icstzfix.handler import (
    MAX_ICS_BYTES,
    CalendarApp,
    HandlerError,
    is_calendar_content_type,
    is_valid_tz_hint,
    validate_calendar_payload,
)

CALENDAR = (
    "BEGIN:VCALENDAR\r\n"
    "BEGIN:VEVENT\r\n"
    "DTSTART;TZID=W. Europe Standard Time:20250115T105000\r\n"
    "END:VEVENT\r\n"
    "END:VCALENDAR\r\n"
).encode("utf-8")


class _Upstream:
    def __init__(self):
        self.status = 200
        self.content_type = "text/calendar"
        self.body = CALENDAR
        self.url = ""


@pytest.fixture
def upstream(monkeypatch):
    for name in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    config = _Upstream()

    class RequestHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            self.send_response(config.status)
            self.send_header("Content-Type", config.content_type)
            self.send_header("Content-Length", str(len(config.body)))
            self.end_headers()
            try:
                self.wfile.write(config.body)
            except OSError:
                pass

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), RequestHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    config.url = f"http://127.0.0.1:{server.server_port}/feed.ics"
    yield config
    server.shutdown()
    server.server_close()


@pytest.fixture
def app():
    return CalendarApp(allowed_hosts={"127.0.0.1"}, timeout=10)


def _status_of(app, query):
    with pytest.raises(HandlerError) as excinfo:
        app.handle(query)
    return excinfo.value.status


def test_rejects_disallowed_host():
    assert _status_of(CalendarApp(), {"url": "https://example.com/feed.ics"}) == 403


def test_rejects_non_calendar_content_type(app, upstream):
    upstream.content_type = "text/plain"
    upstream.body = b"BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n"
    assert _status_of(app, {"url": upstream.url}) == 415


def test_rejects_invalid_calendar_payload(app, upstream):
    upstream.body = b"NOT-A-CALENDAR\r\n"
    assert _status_of(app, {"url": upstream.url}) == 400


def test_rejects_large_calendar(app, upstream):
    upstream.body = b"BEGIN:VCALENDAR\r\n" + b"A" * MAX_ICS_BYTES
    assert _status_of(app, {"url": upstream.url}) == 413


def test_missing_url():
    assert _status_of(CalendarApp(), {}) == 400


def test_invalid_scheme():
    assert _status_of(CalendarApp(), {"url": "ftp://outlook.office365.com/x"}) == 400


def test_invalid_tz_hint():
    query = {"url": "https://outlook.office365.com/x.ics", "tz_hint": "Berlin"}
    assert _status_of(CalendarApp(), query) == 400


def test_allowed_host_is_case_insensitive():
    assert CalendarApp().is_allowed_host("Outlook.Office365.COM") is True
    assert CalendarApp().is_allowed_host("example.com") is False


def test_upstream_error_status(app, upstream):
    upstream.status = 404
    assert _status_of(app, {"url": upstream.url}) == 502


def test_transform_failure_is_server_error(app, upstream):
    upstream.body = b"BEGIN:VCALENDAR\r\nX:" + b"A" * (1024 * 1024 + 10) + b"\r\n"
    assert _status_of(app, {"url": upstream.url}) == 500


def test_handle_rewrites_calendar(app, upstream):
    body = app.handle({"url": upstream.url}).decode("utf-8")
    assert "DTSTART;TZID=Europe/Berlin:20250115T105000" in body


def test_handle_applies_tz_hint_to_declared_zone(app, upstream):
    upstream.body = (
        b"BEGIN:VCALENDAR\r\nBEGIN:VTIMEZONE\r\nTZID:Custom\r\nEND:VTIMEZONE\r\n"
        b"DTSTART;TZID=Custom:20250101T000000\r\nEND:VCALENDAR\r\n"
    )
    body = app.handle({"url": upstream.url, "tz_hint": "Europe/Paris"}).decode("utf-8")
    assert "DTSTART;TZID=Europe/Paris:20250101T000000" in body


def test_wsgi_success(app, upstream):
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    environ = {"QUERY_STRING": "url=" + quote(upstream.url, safe="")}
    body = b"".join(app(environ, start_response))
    assert captured["status"] == "200 OK"
    assert captured["headers"]["Content-Type"] == "text/calendar; charset=utf-8"
    assert b"TZID=Europe/Berlin" in body


def test_wsgi_error_response():
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    environ = {"QUERY_STRING": "url=" + quote("https://example.com/feed.ics", safe="")}
    body = b"".join(CalendarApp()(environ, start_response))
    assert captured["status"] == "403 Forbidden"
    assert body == b"source host is not allowed\n"
    assert captured["headers"]["Content-Type"] == "text/plain; charset=utf-8"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Europe/Berlin", True),
        ("America/New_York", True),
        ("EuropeBerlin", False),
        ("Europe/", False),
        ("Europe /Berlin", False),
        ("Europe/Berlin/Extra", False),
        ("Europe/Berlin+Test", True),
    ],
)
def test_is_valid_tz_hint(value, expected):
    assert is_valid_tz_hint(value) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("text/calendar", True),
        ("  Text/Calendar; charset=utf-8 ", True),
        ("text/plain", False),
        ("", False),
    ],
)
def test_is_calendar_content_type(value, expected):
    assert is_calendar_content_type(value) is expected


def test_validate_accepts_leading_blank_lines():
    assert validate_calendar_payload(b"\r\n  \r\nBEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n") is None


@pytest.mark.parametrize("payload", [b"", b"\r\n\r\n", b"VERSION:2.0\r\nBEGIN:VCALENDAR\r\n"])
def test_validate_rejects(payload):
    with pytest.raises(ValueError):
        validate_calendar_payload(payload)