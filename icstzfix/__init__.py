"""Rewrite time zone identifiers in iCalendar feeds to IANA zone names, as a library and a WSGI service."""

__version__ = "0.1.0"