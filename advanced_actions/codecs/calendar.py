"""
Calendar link codecs.

Two encodings of the same event fields: a Google Calendar "render" URL and
an iCalendar file packed into a ``data:`` URL. Both return None when the
start date cannot be parsed; callers render the item as an inert container.
"""

import base64
import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple, Union
from urllib.parse import quote, urlencode

from dateutil import parser as date_parser

from advanced_actions.config import Settings, get_settings
from advanced_actions.core.capabilities import Clock, SystemClock

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
ICS_PRODID = "-//advanced-actions//EN"
DATE_FORMAT = "%Y%m%dT%H%M%S"

DateInput = Union[str, datetime, None]

_TAG_RE = re.compile(r"<[^>]*>")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_UNSAFE_LOCATION_RE = re.compile(r'[<>"\\;\r\n]')
_UNSAFE_FILENAME_RE = re.compile(r"[^\w\s-]")


@dataclass(frozen=True)
class ICalendarPayload:
    """An ``.ics`` download: base64 data URL plus suggested filename."""

    data: str
    filename: str

    def decode(self) -> str:
        """Return the iCalendar text carried by ``data``."""
        _, _, encoded = self.data.partition(",")
        return base64.b64decode(encoded).decode("utf-8")


def parse_instant(value: DateInput) -> Optional[datetime]:
    """Parse ``value`` to an aware UTC datetime. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def resolve_range(start: DateInput, end: DateInput = None) -> Optional[Tuple[datetime, datetime]]:
    """Parse an event range, clamping a missing or earlier end to the start."""
    start_at = parse_instant(start)
    if start_at is None:
        if start:
            logger.warning("Unparseable calendar start date %r", start)
        return None
    end_at = parse_instant(end)
    if end_at is None or end_at < start_at:
        end_at = start_at
    return start_at, end_at


def format_instant(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(DATE_FORMAT)


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "")


def to_google_calendar_url(
    start: DateInput,
    end: DateInput = None,
    title: str = "",
    description: str = "",
    location: str = "",
    timezone_name: str = "",
) -> Optional[str]:
    """Build a Google Calendar event template URL, or None for a bad start."""
    span = resolve_range(start, end)
    if span is None:
        return None
    start_at, end_at = span

    params = [
        ("action", "TEMPLATE"),
        ("text", title or ""),
        ("dates", f"{format_instant(start_at)}/{format_instant(end_at)}"),
    ]
    details = strip_html(description)
    if details:
        params.append(("details", details))
    if location:
        params.append(("location", location))
    if timezone_name:
        params.append(("ctz", timezone_name))

    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params, quote_via=quote)}"


def ics_filename(title: str) -> str:
    stem = _UNSAFE_FILENAME_RE.sub("", title or "").strip()
    return f"{stem or 'event'}.ics"


def event_uid(title: str, start: str, end: str, url: str, origin: str) -> str:
    digest = hashlib.sha1(f"{title}|{start}|{end}|{url}".encode("utf-8")).hexdigest()
    return f"{digest[:16]}@{origin}"


def to_icalendar_payload(
    start: DateInput,
    end: DateInput = None,
    title: str = "",
    description: str = "",
    location: str = "",
    url: str = "",
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None,
) -> Optional[ICalendarPayload]:
    """Build an iCalendar download for one event, or None for a bad start.

    ``DTSTAMP`` comes from ``clock`` (wall clock by default), so repeated
    calls differ only in that line.
    """
    span = resolve_range(start, end)
    if span is None:
        return None
    start_at, end_at = span
    settings = settings or get_settings()
    clock = clock or SystemClock()

    dtstart = format_instant(start_at)
    dtend = format_instant(end_at)
    summary = _LINE_BREAK_RE.sub(" ", title or "")
    details = _LINE_BREAK_RE.sub("\\\\n", strip_html(description))
    place = _UNSAFE_LOCATION_RE.sub("", location or "")
    link = _LINE_BREAK_RE.sub("", url or "")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODID}",
        "BEGIN:VEVENT",
        f"LOCATION:{place}",
        f"DESCRIPTION:{details}",
        f"DTSTART:{dtstart}",
        f"DTEND:{dtend}",
        f"SUMMARY:{summary}",
        f"URL:{link}",
        f"DTSTAMP:{format_instant(clock.now())}",
        f"UID:{event_uid(summary, dtstart, dtend, link, settings.site_origin)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    body = "\r\n".join(lines)
    encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return ICalendarPayload(data=f"data:text/calendar;base64,{encoded}", filename=ics_filename(title))
