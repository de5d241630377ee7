"""Integration test fixtures.

Builds small but real WARC files with warcio's writer so the whole pipeline
(archive iteration, HTTP parsing, XML scan, aggregation, output) runs
against the same bytes a crawler would produce. Feed bodies come from
tests/conftest.py (georss_feed, plain_feed).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING

import pytest
from warcio.statusandheaders import StatusAndHeaders
from warcio.warcwriter import WARCWriter

if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class Capture:
    """One fetched URL: becomes a request/response record pair.

    Tests pass plain ``(url, body)`` or ``(url, body, content_type)`` tuples.
    """

    url: str
    body: str
    content_type: str = "application/rss+xml; charset=utf-8"


WarcFactory = Callable[..., "Path"]


def _write_warc(path: Path, captures: list[Capture], *, with_metadata: bool = True) -> Path:
    with path.open("wb") as fh:
        writer = WARCWriter(fh, gzip=path.name.endswith(".gz"))
        writer.write_record(
            writer.create_warcinfo_record(path.name, {"software": "georsscount-tests"})
        )
        for capture in captures:
            request_headers = StatusAndHeaders(
                "GET / HTTP/1.1",
                [("Host", capture.url.split("/")[2]), ("Accept", "*/*")],
                is_http_request=True,
            )
            writer.write_record(
                writer.create_warc_record(
                    capture.url, "request", payload=BytesIO(b""), http_headers=request_headers
                )
            )

            response_headers = StatusAndHeaders(
                "200 OK",
                [("Content-Type", capture.content_type), ("Server", "feedsrv")],
                protocol="HTTP/1.1",
            )
            writer.write_record(
                writer.create_warc_record(
                    capture.url,
                    "response",
                    payload=BytesIO(capture.body.encode("utf-8")),
                    http_headers=response_headers,
                )
            )

            if with_metadata:
                writer.write_record(
                    writer.create_warc_record(
                        capture.url,
                        "metadata",
                        payload=BytesIO(b"fetchTimeMs: 12\r\n"),
                        warc_content_type="application/warc-fields",
                    )
                )
    return path


@pytest.fixture()
def write_warc(tmp_path: Path) -> WarcFactory:
    """Write captures to ``tmp_path/<name>`` and return the file path."""

    def _make(name: str, captures: list[tuple[str, ...]], *, with_metadata: bool = True) -> Path:
        return _write_warc(
            tmp_path / name, [Capture(*item) for item in captures], with_metadata=with_metadata
        )

    return _make


@pytest.fixture()
def corpus(
    tmp_path: Path, write_warc: WarcFactory, georss_feed: str, plain_feed: str
) -> Path:
    """Two archives in one directory; the quakes feed is captured in both."""
    write_warc(
        "crawl-00000.warc.gz",
        [
            ("http://quakes.example/feed.rss", georss_feed),
            ("http://news.example/rss", plain_feed),
            ("http://www.example/", "<html><body>hi</body></html>", "text/html"),
        ],
    )
    write_warc(
        "crawl-00001.warc",
        [
            ("http://quakes.example/feed.rss", georss_feed),
            ("http://geo.example/rss", georss_feed, "text/xml"),
        ],
    )
    return tmp_path
