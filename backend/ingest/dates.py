"""
French results-page dates to canonical UTC instants.

Headers on the results site read like "Mardi 03 août 2021"; each row carries
its own kickoff time ("21:00"). Both are local to the site's timezone.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shared.errors import DateParseError

# Lowercase, accented, unabbreviated. Lookups are exact: "Août" or a
# mis-decoded "aoÃ»t" are not found.
FRENCH_MONTHS: tuple[str, ...] = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)

DEFAULT_SOURCE_TZ = "Europe/Paris"
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def month_index(name: str) -> int:
    """1-based month number for a French month name, or DateParseError."""
    try:
        return FRENCH_MONTHS.index(name) + 1
    except ValueError:
        raise DateParseError(None, None, f"unknown month {name!r}") from None


def _resolve_tz(tz: str | ZoneInfo) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise DateParseError(None, None, f"unknown timezone {tz!r}") from exc


def parse_local_datetime(
    header_text: Optional[str],
    time_text: Optional[str],
    tz: str | ZoneInfo = DEFAULT_SOURCE_TZ,
) -> datetime:
    """
    Combine a "<weekday> <day> <month> <year>" header with a kickoff time.

    Returns:
        An aware datetime in UTC.

    Raises:
        DateParseError: On a malformed header, unknown month, bad time or an
            impossible calendar date.
    """
    if not header_text or not time_text:
        raise DateParseError(header_text, time_text, "missing header or time")

    tokens = header_text.split()[1:]
    if len(tokens) != 3:
        raise DateParseError(header_text, time_text, "expected '<weekday> <day> <month> <year>'")

    day, month_name, year = tokens
    try:
        month = month_index(month_name)
    except DateParseError as exc:
        raise DateParseError(header_text, time_text, exc.reason) from None

    # <year> <month> <day> <time>
    stamp = " ".join([year, f"{month:02d}", day, time_text.strip()])
    for time_fmt in _TIME_FORMATS:
        try:
            naive = datetime.strptime(stamp, f"%Y %m %d {time_fmt}")
            break
        except ValueError:
            continue
    else:
        raise DateParseError(header_text, time_text, f"invalid date/time {stamp!r}")

    return naive.replace(tzinfo=_resolve_tz(tz)).astimezone(timezone.utc)


def to_iso_instant(value: datetime) -> str:
    """Render an aware datetime as 'YYYY-MM-DDTHH:MM:SS.mmmZ'."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_iso_instant(text: str) -> datetime:
    """Inverse of to_iso_instant; accepts any ISO-8601 string with an offset or 'Z'."""
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise DateParseError(text, None, "not an ISO-8601 instant") from exc
    if parsed.tzinfo is None:
        raise DateParseError(text, None, "instant has no UTC offset")
    return parsed.astimezone(timezone.utc)


def normalize_date(
    header_text: Optional[str],
    time_text: Optional[str],
    tz: str | ZoneInfo = DEFAULT_SOURCE_TZ,
) -> str:
    """
    Canonical UTC instant string for a header/time pair.

    >>> normalize_date("Mardi 03 août 2021", "21:00")
    '2021-08-03T19:00:00.000Z'
    """
    return to_iso_instant(parse_local_datetime(header_text, time_text, tz))
