"""WSGI service that fetches a remote calendar and fixes its time zones."""

from __future__ import annotations

import argparse
import http.client
import re
from collections.abc import Iterable, Mapping
from http import HTTPStatus
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlsplit
from urllib.request import Request, urlopen
from wsgiref.simple_server import make_server

from .transform import transform

DEFAULT_ALLOWED_HOSTS = frozenset({"outlook.office365.com"})
DEFAULT_TIMEOUT = 30.0
MAX_ICS_BYTES = 5 * 1024 * 1024
_SCAN_LIMIT = 64 * 1024

_TZ_HINT_PATTERN = re.compile(r"[A-Za-z0-9_+.-]+/[A-Za-z0-9_+.-]+")


class HandlerError(Exception):
    """A request that cannot be served, with the HTTP status to answer."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def is_valid_tz_hint(tz_hint: str) -> bool:
    """Tell whether a tz_hint looks like an ``Area/Location`` zone name."""
    return _TZ_HINT_PATTERN.fullmatch(tz_hint) is not None


def is_calendar_content_type(content_type: str) -> bool:
    """Tell whether a Content-Type header names text/calendar."""
    return "text/calendar" in content_type.strip().lower()


def validate_calendar_payload(payload: bytes) -> None:
    """Raise ValueError unless the first non-blank line is BEGIN:VCALENDAR."""
    for raw in payload.split(b"\n"):
        if len(raw) >= _SCAN_LIMIT:
            raise ValueError("calendar line too long")
        line = raw.decode("utf-8", errors="replace").strip()
        if not line:
            continue
        if line != "BEGIN:VCALENDAR":
            raise ValueError("missing BEGIN:VCALENDAR")
        return
    raise ValueError("empty calendar")


class CalendarApp:
    """Serve a rewritten copy of a calendar fetched from an allowed host."""

    def __init__(
        self,
        allowed_hosts: Iterable[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        hosts = DEFAULT_ALLOWED_HOSTS if allowed_hosts is None else allowed_hosts
        self.allowed_hosts = {host.lower() for host in hosts}
        self.timeout = timeout

    def is_allowed_host(self, host: str) -> bool:
        """Tell whether calendars may be fetched from this host."""
        return host.lower() in self.allowed_hosts

    def handle(self, query: Mapping[str, str]) -> bytes:
        """Return the rewritten calendar for the request's query parameters.

        Raises HandlerError carrying the HTTP status for every failure.
        """
        source_url = query.get("url", "")
        if not source_url:
            raise HandlerError(HTTPStatus.BAD_REQUEST, "missing url query parameter")

        try:
            parsed = urlsplit(source_url)
            host = parsed.hostname or ""
        except ValueError:
            raise HandlerError(HTTPStatus.BAD_REQUEST, "invalid url query parameter") from None
        if parsed.scheme not in ("http", "https"):
            raise HandlerError(HTTPStatus.BAD_REQUEST, "invalid url query parameter")

        if not self.is_allowed_host(host):
            raise HandlerError(HTTPStatus.FORBIDDEN, "source host is not allowed")

        tz_hint = query.get("tz_hint", "").strip()
        if tz_hint and not is_valid_tz_hint(tz_hint):
            raise HandlerError(HTTPStatus.BAD_REQUEST, "invalid tz_hint query parameter")

        payload = self._fetch(source_url)
        if len(payload) > MAX_ICS_BYTES:
            raise HandlerError(
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE, "source calendar exceeds size limit"
            )
        try:
            validate_calendar_payload(payload)
        except ValueError:
            raise HandlerError(HTTPStatus.BAD_REQUEST, "source calendar is not valid") from None

        try:
            return "".join(transform([payload], tz_hint)).encode("utf-8")
        except ValueError:
            raise HandlerError(
                HTTPStatus.INTERNAL_SERVER_ERROR, "failed to transform calendar"
            ) from None

    def _fetch(self, source_url: str) -> bytes:
        try:
            request = Request(source_url, method="GET")
        except ValueError:
            raise HandlerError(HTTPStatus.BAD_REQUEST, "failed to build request") from None

        try:
            with urlopen(request, timeout=self.timeout) as response:
                if not 200 <= response.status < 300:
                    raise HandlerError(
                        HTTPStatus.BAD_GATEWAY, "source calendar returned non-2xx status"
                    )
                if not is_calendar_content_type(response.headers.get("Content-Type", "")):
                    raise HandlerError(
                        HTTPStatus.UNSUPPORTED_MEDIA_TYPE, "source calendar is not text/calendar"
                    )
                try:
                    return response.read(MAX_ICS_BYTES + 1)
                except (OSError, http.client.HTTPException):
                    raise HandlerError(
                        HTTPStatus.BAD_GATEWAY, "failed to read source calendar"
                    ) from None
        except HTTPError as err:
            err.close()
            raise HandlerError(
                HTTPStatus.BAD_GATEWAY, "source calendar returned non-2xx status"
            ) from None
        except (URLError, OSError, http.client.HTTPException, ValueError):
            raise HandlerError(
                HTTPStatus.BAD_GATEWAY, "failed to fetch source calendar"
            ) from None

    def __call__(self, environ, start_response):
        parsed = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
        query = {key: values[0] for key, values in parsed.items()}
        try:
            body = self.handle(query)
            status = HTTPStatus.OK
            headers = [("Content-Type", "text/calendar; charset=utf-8")]
        except HandlerError as err:
            body = (err.message + "\n").encode("utf-8")
            status = HTTPStatus(err.status)
            headers = [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("X-Content-Type-Options", "nosniff"),
            ]
        headers.append(("Content-Length", str(len(body))))
        start_response(f"{status.value} {status.phrase}", headers)
        return [body]


def main(argv=None) -> int:
    """Serve the calendar application over HTTP."""
    parser = argparse.ArgumentParser(description="Serve calendars with fixed time zones.")
    parser.add_argument("--host", default="127.0.0.1", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    parser.add_argument(
        "--allow-host",
        action="append",
        dest="allowed_hosts",
        help="host calendars may be fetched from (repeatable)",
    )
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help="upstream timeout in seconds"
    )
    args = parser.parse_args(argv)

    app = CalendarApp(args.allowed_hosts, args.timeout)
    with make_server(args.host, args.port, app) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0