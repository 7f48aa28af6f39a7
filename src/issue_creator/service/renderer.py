"""Template rendering for ticket titles and bodies.

Templates are Jinja2 and see these names:

* ``CurrentTime`` - the reference time of the run (datetime)
* ``LastIssue`` - the prior ticket (``Title``, ``Body``, ``URL``, ``Labels``,
  ``Owner``, ``Repository``)
* ``AddDay(days)`` - reference time shifted by whole calendar days (datetime)
* ``AddDateAndFormat(format, days)`` - the same, formatted as a string

Date formats are Go reference layouts such as ``2006-01-02`` or
``Mon Jan 2``, so templates written for the Go version of this tool keep
their meaning. A format containing ``%`` is passed to ``strftime`` instead.
The ``date`` filter applies the same formatting to any datetime.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError

from issue_creator.service.exceptions import RenderError, TemplateParseError

if TYPE_CHECKING:
    from collections.abc import Callable

    from jinja2 import Template

    from issue_creator.repository.models import Ticket

logger = logging.getLogger("issue_creator.service.renderer")

_MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Longest alternatives first; re tries them left to right at each position.
_LAYOUT_TOKEN = re.compile(
    r"January|Jan|Monday|Mon|MST|2006|002|__2|_2|01|02|03|04|05|06|15|1|2|3|4|5|PM|pm"
    r"|-07:00:00|-070000|-07:00|-0700|-07|Z07:00:00|Z070000|Z07:00|Z0700|Z07"
    r"|[.,](?:0+|9+)(?!\d)"
)


def add_days(reference: datetime, days: int) -> datetime:
    """Shift a time by whole calendar days, keeping its wall-clock time."""
    return reference + timedelta(days=days)


def _offset(dt: datetime) -> timedelta:
    return dt.utcoffset() or timedelta(0)


def _format_offset(dt: datetime, token: str) -> str:
    offset = _offset(dt)
    if token.startswith("Z"):
        if offset == timedelta(0):
            return "Z"
        token = "-" + token[1:]

    sign = "-" if offset < timedelta(0) else "+"
    seconds = abs(int(offset.total_seconds()))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    if token == "-07:00:00":
        return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
    if token == "-070000":
        return f"{sign}{hours:02d}{minutes:02d}{secs:02d}"
    if token == "-07:00":
        return f"{sign}{hours:02d}:{minutes:02d}"
    if token == "-0700":
        return f"{sign}{hours:02d}{minutes:02d}"
    return f"{sign}{hours:02d}"


def _format_fraction(dt: datetime, token: str) -> str:
    digits = len(token) - 1
    micros = f"{dt.microsecond:06d}".ljust(9, "0")[:digits]
    if token[1] == "9":
        micros = micros.rstrip("0")
        if not micros:
            return ""
    return token[0] + micros


def _format_token(dt: datetime, token: str) -> str:
    hour12 = dt.hour % 12 or 12
    simple: dict[str, Callable[[], str]] = {
        "January": lambda: _MONTHS[dt.month - 1],
        "Jan": lambda: _MONTHS[dt.month - 1][:3],
        "Monday": lambda: _WEEKDAYS[dt.weekday()],
        "Mon": lambda: _WEEKDAYS[dt.weekday()][:3],
        "MST": lambda: dt.tzname() or "UTC",
        "2006": lambda: f"{dt.year:04d}",
        "06": lambda: f"{dt.year % 100:02d}",
        "002": lambda: f"{dt.timetuple().tm_yday:03d}",
        "__2": lambda: f"{dt.timetuple().tm_yday:>3d}",
        "_2": lambda: f"{dt.day:>2d}",
        "01": lambda: f"{dt.month:02d}",
        "1": lambda: str(dt.month),
        "02": lambda: f"{dt.day:02d}",
        "2": lambda: str(dt.day),
        "15": lambda: f"{dt.hour:02d}",
        "03": lambda: f"{hour12:02d}",
        "3": lambda: str(hour12),
        "04": lambda: f"{dt.minute:02d}",
        "4": lambda: str(dt.minute),
        "05": lambda: f"{dt.second:02d}",
        "5": lambda: str(dt.second),
        "PM": lambda: "PM" if dt.hour >= 12 else "AM",
        "pm": lambda: "pm" if dt.hour >= 12 else "am",
    }
    if token in simple:
        return simple[token]()
    if token[0] in ".,":
        return _format_fraction(dt, token)
    return _format_offset(dt, token)


def format_time(value: datetime, layout: str) -> str:
    """Format a datetime with a Go reference layout or a strftime pattern.

    >>> format_time(datetime(2024, 2, 19), "2006-01-02")
    '2024-02-19'
    """
    if "%" in layout:
        return value.strftime(layout)
    return _LAYOUT_TOKEN.sub(lambda m: _format_token(value, m.group(0)), layout)


def add_date_and_format(reference: datetime, layout: str, days: int) -> str:
    """Format the reference time shifted by ``days`` calendar days."""
    return format_time(add_days(reference, days), layout)


class TicketRenderer:
    """Compiles and renders ticket templates against one reference time."""

    def __init__(self, current_time: datetime) -> None:
        self.current_time = current_time
        self.environment = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.environment.globals["AddDateAndFormat"] = partial(add_date_and_format, current_time)
        self.environment.filters["date"] = format_time

    def compile(self, name: str, source: str) -> Template:
        """Compile a template.

        Args:
            name: What is being compiled ("title" or "body"), for error messages.
            source: Template text.

        Raises:
            TemplateParseError: If the template has a syntax error.
        """
        logger.debug("Compiling %s template: %s", name, source)
        try:
            return self.environment.from_string(source)
        except TemplateSyntaxError as e:
            raise TemplateParseError(f"Failed to parse {name}: {e}") from e

    def render(self, name: str, template: Template, last_issue: Ticket) -> str:
        """Render a compiled template for the given prior ticket.

        Raises:
            RenderError: If the template fails while rendering.
        """
        context = {
            "CurrentTime": self.current_time,
            "LastIssue": last_issue.template_fields(),
            "AddDay": partial(add_days, self.current_time),
        }
        try:
            return template.render(context)
        except (TemplateError, TypeError, ValueError, AttributeError, OverflowError) as e:
            raise RenderError(f"Failed to render {name}: {e}") from e


def local_now() -> datetime:
    """Current time in the local timezone, timezone-aware.

    When ``TZ`` names an IANA zone the result carries a ``ZoneInfo``, so
    ``AddDay`` across a daylight-saving change picks up the new offset.
    Otherwise the system's current fixed offset is used and shifted times
    keep it.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        try:
            return datetime.now(ZoneInfo(name))
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("TZ=%s is not an IANA zone, using the system offset", name)
    return datetime.now(timezone.utc).astimezone()
