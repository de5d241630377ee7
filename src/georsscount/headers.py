"""HTTP response preamble parser.

Reads the status line and header block of one captured HTTP response from a
forward-only text stream. Whatever the parser has not consumed when it
returns is the document body, positioned at its first character.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from georsscount.errors import MalformedResponseError

if TYPE_CHECKING:
    from typing import BinaryIO

# Bodies are always decoded as UTF-8; the charset header is informational only.
BODY_ENCODING = "utf-8"

_STATUS_CODE_RE = re.compile(r"[+-]?[0-9]+")
_CHARSET_PREFIX = "charset="


@dataclass
class ResponseHead:
    """Status code and headers of one HTTP response."""

    status_code: int
    # lower-cased header name → trimmed value (last duplicate wins)
    headers: dict[str, str] = field(default_factory=dict)
    mime_type: str | None = None
    charset: str | None = None


def open_text(raw: BinaryIO) -> codecs.StreamReader:
    """Wrap a raw byte stream as UTF-8 text, replacing undecodable bytes."""
    return codecs.getreader(BODY_ENCODING)(raw, errors="replace")


def parse_status_line(line: str, *, url: str | None = None) -> int:
    """Return the numeric status code from ``"HTTP/1.1 200 OK"``-style lines."""
    segments = line.rstrip("\r\n").split(" ")
    if len(segments) < 2 or not _STATUS_CODE_RE.fullmatch(segments[1]):
        raise MalformedResponseError(f"Unparseable HTTP status line: {line[:80]!r}", url=url)
    return int(segments[1])


def parse_content_type(value: str) -> tuple[str, str | None]:
    """Split a Content-Type value into ``(mime_type, charset)``.

    ``"application/rss+xml; charset=utf-8"`` → ``("application/rss+xml", "utf-8")``.
    Only the first parameter after ``;`` is inspected for a charset.
    """
    n = value.find(";")
    if n <= 0:
        return value, None

    mime_type = value[:n].strip()
    extra = value[n + 1 :].strip()
    if extra.startswith(_CHARSET_PREFIX):
        return mime_type, extra[len(_CHARSET_PREFIX) :]
    return mime_type, None


def parse_response_head(reader: codecs.StreamReader, *, url: str | None = None) -> ResponseHead:
    """Consume the status line and header block from *reader*.

    Stops after the first blank line or at end of stream. Header lines
    without a name (no ``:`` or a leading ``:``) are skipped.
    """
    first = reader.readline()
    if not first:
        raise MalformedResponseError("Empty HTTP response", url=url)

    head = ResponseHead(status_code=parse_status_line(first, url=url))

    while line := reader.readline():
        line = line.strip()
        if not line:
            break

        n = line.find(":")
        if n <= 0:
            continue

        name = line[:n].strip().lower()
        value = line[n + 1 :].strip()
        head.headers[name] = value

        if name == "content-type":
            head.mime_type, head.charset = parse_content_type(value)

    return head
