"""Shared test fixtures for the georsscount test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

GEORSS_NS = "http://www.georss.org/georss"

# 2014-08-25T07:07:58Z
RSS_PUB_DATE = "Mon, 25 Aug 2014 07:07:58 +0000"
RSS_PUB_EPOCH = 1408950478

ResponseFactory = Callable[..., bytes]


@pytest.fixture()
def make_response() -> ResponseFactory:
    """Build a raw HTTP response block (status line, headers, body)."""

    def _make(
        body: str | bytes = b"",
        *,
        content_type: str | None = "application/rss+xml; charset=utf-8",
        status_line: str = "HTTP/1.1 200 OK",
        extra_headers: list[tuple[str, str]] | None = None,
    ) -> bytes:
        lines = [status_line]
        if content_type is not None:
            lines.append(f"Content-Type: {content_type}")
        for name, value in extra_headers or []:
            lines.append(f"{name}: {value}")
        head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
        if isinstance(body, str):
            body = body.encode("utf-8")
        return head + body

    return _make


@pytest.fixture()
def georss_feed() -> str:
    """RSS 2.0 feed with two distinct GeoRSS points and one pubDate."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<rss version="2.0" xmlns:georss="{GEORSS_NS}">\n'
        "  <channel>\n"
        "    <title>Recent quakes</title>\n"
        f"    <pubDate>{RSS_PUB_DATE}</pubDate>\n"
        "    <item>\n"
        "      <title>M 4.1 - Quebec</title>\n"
        "      <georss:point>45.256 -71.92</georss:point>\n"
        "    </item>\n"
        "    <item>\n"
        "      <title>M 2.3 - Vermont</title>\n"
        "      <georss:point>44.10 -72.55</georss:point>\n"
        "    </item>\n"
        "  </channel>\n"
        "</rss>\n"
    )


@pytest.fixture()
def plain_feed() -> str:
    """RSS 2.0 feed without any GeoRSS namespace."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        "  <channel>\n"
        f"    <pubDate>{RSS_PUB_DATE}</pubDate>\n"
        "    <item><title>No geo here</title></item>\n"
        "  </channel>\n"
        "</rss>\n"
    )
