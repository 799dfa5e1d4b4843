"""Rewrite the time-zone identifiers of an iCalendar stream to IANA names.

VTIMEZONE blocks are dropped from the output. Their rules are matched
against known signatures, and every TZID they declare is mapped to an IANA
zone name where one can be found. The remaining content lines are rewritten
and folded again.
"""

from __future__ import annotations

import codecs
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .fold import fold_line, split_line
from .mappings import (
    TzRule,
    known_signature_mapping,
    known_windows_zone_mapping,
    normalize_rrule,
)

MAX_LINE_BYTES = 1024 * 1024
_STANDARD_TIME_SUFFIX = " Standard Time"
_SECTION_MARKERS = {
    "BEGIN:STANDARD": "STANDARD",
    "END:STANDARD": "",
    "BEGIN:DAYLIGHT": "DAYLIGHT",
    "END:DAYLIGHT": "",
}


@dataclass
class _ZoneState:
    """What has been collected from the VTIMEZONE block being read."""

    tzid: str = ""
    section: str = ""
    rule: TzRule = field(default_factory=TzRule)

    def consume(self, line: str) -> bool:
        """Record one line of the block; return True when the block ends."""
        if line == "END:VTIMEZONE":
            return True
        if line in _SECTION_MARKERS:
            self.section = _SECTION_MARKERS[line]
            return False
        if line.startswith("TZID:"):
            self.tzid = line[len("TZID:"):].strip()
            return False
        if not self.section:
            return False

        parts = split_line(line)
        if parts is None:
            return False
        key, value = parts
        value = value.strip()
        prefix = "standard" if self.section == "STANDARD" else "daylight"

        if key == "TZOFFSETFROM":
            setattr(self.rule, f"{prefix}_offset_from", value)
        elif key == "TZOFFSETTO":
            setattr(self.rule, f"{prefix}_offset_to", value)
        elif key == "RRULE":
            setattr(self.rule, f"{prefix}_rrule", normalize_rrule(value))
        return False


def _check_length(line: str) -> str:
    if len(line.encode("utf-8")) >= MAX_LINE_BYTES:
        raise ValueError("calendar line too long")
    return line


def _read_lines(stream: Iterable[str | bytes]) -> Iterator[str]:
    """Split chunks of text or UTF-8 bytes into lines at each newline."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    for chunk in stream:
        if isinstance(chunk, (bytes, bytearray)):
            chunk = decoder.decode(bytes(chunk))
        buffer += chunk
        *complete, buffer = buffer.split("\n")
        for line in complete:
            yield _check_length(line).removesuffix("\r")
        _check_length(buffer)
    buffer += decoder.decode(b"", final=True)
    if buffer:
        yield _check_length(buffer).removesuffix("\r")


def _logical_lines(lines: Iterable[str]) -> Iterator[str]:
    """Unfold continuation lines; blank lines are dropped."""
    pending = ""
    for line in lines:
        line = line.removesuffix("\r")
        if line[:1] in (" ", "\t"):
            pending += line.lstrip(" \t")
            continue
        if pending:
            yield pending
        pending = line
    if pending:
        yield pending


def transform(stream: Iterable[str | bytes], tz_hint: str = "") -> Iterator[str]:
    """Yield the rewritten calendar as CRLF-terminated physical lines.

    ``stream`` is any iterable of text or UTF-8 byte chunks, such as an open
    file. A non-empty ``tz_hint`` is used as the IANA name for every zone
    declared in the calendar. Raises ValueError for a line of 1 MiB or more.
    """
    tz_hint = tz_hint.strip()
    signature_mapping = known_signature_mapping()
    windows_mapping = known_windows_zone_mapping()
    overrides: dict[str, str] = {}
    zone: _ZoneState | None = None

    for line in _logical_lines(_read_lines(stream)):
        if line == "BEGIN:VTIMEZONE":
            zone = _ZoneState()
            continue
        if zone is not None:
            if zone.consume(line):
                if zone.tzid:
                    _apply_mapping(overrides, signature_mapping, zone, tz_hint)
                zone = None
            continue
        for folded in fold_line(update_line(line, overrides, windows_mapping)):
            yield folded + "\r\n"


def transform_text(content: str | bytes, tz_hint: str = "") -> str:
    """Rewrite a whole calendar held in memory and return it as text."""
    return "".join(transform([content], tz_hint))


def _apply_mapping(
    overrides: dict[str, str],
    signature_mapping: Mapping[str, str],
    zone: _ZoneState,
    tz_hint: str,
) -> None:
    if tz_hint:
        overrides[zone.tzid] = tz_hint
        return
    iana = signature_mapping.get(zone.rule.signature())
    if iana is not None:
        overrides[zone.tzid] = iana


def update_line(
    line: str, overrides: Mapping[str, str], windows_mapping: Mapping[str, str]
) -> str:
    """Rewrite a TZID property or TZID parameters of one content line."""
    parts = split_line(line)
    if parts is None:
        return line
    key, value = parts

    if key == "TZID":
        updated = resolve_tzid(value, overrides, windows_mapping)
        return line if updated is None else "TZID:" + updated

    if "TZID=" in key:
        return replace_tzid_param(key, overrides, windows_mapping) + ":" + value

    return line


def replace_tzid_param(
    key: str, overrides: Mapping[str, str], windows_mapping: Mapping[str, str]
) -> str:
    """Replace the values of TZID parameters in a property name part."""
    name, *params = key.split(";")
    if not params:
        return key

    rewritten = []
    for param in params:
        if param.startswith("TZID="):
            updated = resolve_tzid(param[len("TZID="):], overrides, windows_mapping)
            if updated is not None:
                param = "TZID=" + updated
        rewritten.append(param)
    return ";".join([name, *rewritten])


def resolve_tzid(
    tzid: str, overrides: Mapping[str, str], windows_mapping: Mapping[str, str]
) -> str | None:
    """Return the IANA name for a TZID, or None when it should stay as is."""
    trimmed = tzid.removesuffix(_STANDARD_TIME_SUFFIX) if tzid.endswith(
        _STANDARD_TIME_SUFFIX
    ) else None

    if tzid in overrides:
        return overrides[tzid]
    if trimmed is not None and trimmed in overrides:
        return overrides[trimmed]

    if is_valid_iana_tzid(tzid):
        return None

    if tzid in windows_mapping:
        return windows_mapping[tzid]
    if trimmed is not None and trimmed in windows_mapping:
        return windows_mapping[trimmed]
    return None


@lru_cache(maxsize=512)
def is_valid_iana_tzid(tzid: str) -> bool:
    """Tell whether the name can be loaded as a time zone."""
    if tzid in ("", "UTC", "Local"):
        return True
    try:
        ZoneInfo(tzid)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True