"""Feed date normalisation.

Feeds carry dates in two families of formats:

RSS 2.0 (RFC 822), e.g. ``<pubDate>Mon, 25 Aug 2014 07:07:58 +0000</pubDate>``
or ``Sat, 07 Sep 2002 0:00:01 GMT``.

Atom (RFC 3339 / ISO 8601), e.g.::

    <updated>2003-12-13T18:30:02Z</updated>
    <updated>2003-12-13T18:30:02.25Z</updated>
    <updated>2003-12-13T18:30:02+01:00</updated>
    <updated>2003-12-13T18:30:02.25+01:00</updated>

Bare dates (``2014-07-22`` or ``2014/07/22``) are read as local noon.
Everything is reduced to whole seconds since the Unix epoch, with
:data:`UNKNOWN_EPOCH` for anything not understood.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

UNKNOWN_EPOCH = -1

_ATOM_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_ATOM_LOCAL_FORMAT = "%Y-%m-%dT%H:%M:%S"
_ATOM_SECONDS_LENGTH = 19  # len("2003-12-13T18:30:02")
_DATE_ONLY_LENGTH = 10  # len("2003-12-13")
_SYNTHETIC_NOON = "T12:00:00"

# "EEE, d MMM yyyy HH:mm:ss zone". Zone is a numeric offset or an RFC 822 name.
_RSS_RE = re.compile(
    r"[A-Za-z]{3,},\s*\d{1,2}\s+[A-Za-z]{3,}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2}\s+"
    r"(?P<zone>[+-]\d{4}|UT|UTC|GMT|Z|[ECMP][SD]T)"
)


def to_epoch_seconds(text: str | None) -> int:
    """Parse an RSS or Atom date string into Unix seconds.

    Returns ``-1`` if the value is missing or its format is not understood.
    """
    if text is None or len(text) < _DATE_ONLY_LENGTH:
        return UNKNOWN_EPOCH

    if len(text) == _DATE_ONLY_LENGTH:
        # Bare date: assume local noon
        return _parse_atom(text.replace("/", "-") + _SYNTHETIC_NOON, local_time=True)

    if text[_DATE_ONLY_LENGTH] == "T":
        return _parse_atom(_strip_fractional_seconds(text))
    return _parse_rss(text)


def _strip_fractional_seconds(text: str) -> str:
    """Drop ``.25`` from ``2003-12-13T18:30:02.25+01:00``, keeping the zone."""
    n = text.find(".")
    if n <= 0:
        return text
    m = n + 1
    while m < len(text) and text[m].isdigit():
        m += 1
    return text[:n] + text[m:]


def _parse_atom(text: str, *, local_time: bool = False) -> int:
    if len(text) < _ATOM_SECONDS_LENGTH:
        return UNKNOWN_EPOCH
    try:
        if local_time:
            parsed = datetime.strptime(text, _ATOM_LOCAL_FORMAT)
        else:
            # The zone designator (Z or a numeric offset) is required
            parsed = datetime.strptime(text, _ATOM_FORMAT)
        return int(parsed.timestamp())
    except (ValueError, OverflowError, OSError):
        return UNKNOWN_EPOCH


def _parse_rss(text: str) -> int:
    match = _RSS_RE.fullmatch(text)
    if match is None:
        return UNKNOWN_EPOCH
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return UNKNOWN_EPOCH
    if parsed.tzinfo is None:
        # parsedate reports "-0000" as "no zone"; it is still a UTC offset
        if match.group("zone") != "-0000":
            return UNKNOWN_EPOCH
        parsed = parsed.replace(tzinfo=UTC)
    try:
        return int(parsed.timestamp())
    except (OverflowError, OSError):
        return UNKNOWN_EPOCH
