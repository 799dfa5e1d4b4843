# icstzfix

Calendar feeds published by Outlook and Exchange often label their events
with Windows time zone names such as `W. Europe Standard Time`, or with
custom zone names defined in `VTIMEZONE` blocks. Many calendar clients do
not understand these and show events at the wrong time.

`icstzfix` rewrites such a feed so that its `TZID` values refer to IANA zone
names (`Europe/Berlin`, `America/New_York`, ...) wherever a mapping is known:

- `VTIMEZONE` blocks are removed from the output. Before removal, their
  standard and daylight offsets and recurrence rules are compared with those
  of a few known zones (`Europe/Berlin`, `Europe/London`,
  `America/New_York`); a match maps the block's `TZID` to that zone.
- Windows zone names are translated with a Windows-to-IANA table. A name is
  also tried without its ` Standard Time` suffix.
- Identifiers that are already valid IANA names, and names that cannot be
  resolved, are left as they are. Names mapped from a `VTIMEZONE` block take
  precedence over both.
- An optional time zone hint (for example `Europe/Paris`) is used for every
  zone declared in a `VTIMEZONE` block of the feed.
- Both `TZID:` properties and `TZID=` parameters (as in
  `DTSTART;TZID=...:`) are rewritten.
- Folded lines are unfolded on input and refolded at 75 characters on
  output, with CRLF line endings. Blank lines are dropped.

## Installation

```
pip install .
```

The package has no runtime dependencies beyond the standard library.

## Running the service

```
icstzfix
```

starts a small HTTP service on `127.0.0.1:8080`. Options:

| Option | Meaning |
|--------|---------|
| `--host` | Address to listen on (default `127.0.0.1`). |
| `--port` | Port to listen on (default `8080`). |
| `--allow-host` | A host calendars may be fetched from; repeat for several. Replaces the default `outlook.office365.com`. |
| `--timeout` | Timeout for fetching the source calendar, in seconds (default `30`). |

Requests take these query parameters:

| Parameter | Meaning |
|-----------|---------|
| `url`     | The `http` or `https` address of the source calendar (required). |
| `tz_hint` | A zone name of the form `Area/Location` used for every zone declared in the feed (optional). |

The service fetches the source calendar and returns the rewritten feed as
`text/calendar; charset=utf-8`. Failures are answered with a short plain-text
message and:

- `400` for a missing or malformed `url`, an invalid `tz_hint`, or a body
  whose first non-blank line is not `BEGIN:VCALENDAR`;
- `403` when the source host is not allowed;
- `413` when the source calendar is larger than 5 MiB;
- `415` when the source does not answer with a `text/calendar` content type;
- `500` when the calendar cannot be transformed (a line of 1 MiB or more);
- `502` when the source cannot be reached or read, or answers with a
  non-2xx status.

`CalendarApp` is a plain WSGI application, so it can also be hosted by any
WSGI server:

```python
from icstzfix.handler import CalendarApp

application = CalendarApp(allowed_hosts={"outlook.office365.com"}, timeout=30)
```

`CalendarApp.handle(query)` can be called directly with a mapping of query
parameters; it returns the rewritten calendar as bytes or raises
`HandlerError`, whose `status` and `message` hold the HTTP answer.

The built-in server is the standard library's single-threaded WSGI
reference server: it serves plain HTTP only and keeps no cache of fetched
calendars.

## Using the library

```python
from icstzfix.transform import transform_text

with open("feed.ics", encoding="utf-8") as source:
    fixed = transform_text(source.read(), "")

print(fixed)
```

Pass a zone name as the second argument to use it for every zone declared
in the feed:

```python
fixed = transform_text(content, "Europe/Paris")
```

For streams, `icstzfix.transform.transform(stream, tz_hint)` takes any
iterable of text or UTF-8 byte chunks, such as an open file, and yields the
output lines, each ending in CRLF. Both functions raise `ValueError` for a
line of 1 MiB or more.

Lower-level helpers are available too: `fold_line`, `unfold_lines` and
`split_line` in `icstzfix.fold`; `update_line`, `resolve_tzid` and
`is_valid_iana_tzid` in `icstzfix.transform`; and `TzRule`,
`normalize_rrule`, `known_signature_mapping` and
`known_windows_zone_mapping` in `icstzfix.mappings`.

## Running the tests

```
pip install .[test]
pytest
```