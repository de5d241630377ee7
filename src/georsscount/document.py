"""Per-record document inspector.

A :class:`ParsedDocument` wraps one captured HTTP response. The status line
and headers are parsed eagerly; everything about the XML body is computed on
first access by a single guarded scan:

    UNPARSED → NAMESPACES_KNOWN → NOT_GEORSS | FULLY_SCANNED

Non-feed documents jump straight to NOT_GEORSS without reading the body.
The scan runs at most once per document, however many threads call the
metric accessors; later calls return the cached values.
"""

from __future__ import annotations

import io
import threading
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from georsscount.config import ScanSettings
from georsscount.dates import UNKNOWN_EPOCH
from georsscount.errors import ErrorCode, GeoRssCountError, XmlStructureError
from georsscount.feeds import is_feed
from georsscount.headers import open_text, parse_response_head
from georsscount.models.metrics import MetricTuple
from georsscount.xmlscan import (
    MetricExtractor,
    XmlEventStream,
    find_geo_namespace,
    sniff_namespaces,
)

if TYPE_CHECKING:
    import codecs
    from typing import BinaryIO

log = structlog.get_logger()


class ScanState(StrEnum):
    UNPARSED = "unparsed"
    NAMESPACES_KNOWN = "namespaces_known"
    NOT_GEORSS = "not_georss"
    FULLY_SCANNED = "fully_scanned"


class ParsedDocument:
    """Lazy view of one HTTP response: headers now, feed metrics on demand."""

    def __init__(
        self,
        raw: BinaryIO,
        *,
        url: str | None = None,
        scan: ScanSettings | None = None,
    ) -> None:
        self.url = url
        self._settings = scan or ScanSettings()
        self._reader = open_text(raw)

        head = parse_response_head(self._reader, url=url)
        self.status_code = head.status_code
        self.mime_type = head.mime_type
        self.charset = head.charset
        self._headers = head.headers

        self._lock = threading.Lock()
        self._state = ScanState.UNPARSED
        self._body_taken = False
        self._namespaces: tuple[str, ...] = ()
        self._geo_namespace: str | None = None
        self._extractor: MetricExtractor | None = None

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        url: str | None = None,
        scan: ScanSettings | None = None,
    ) -> ParsedDocument:
        """Build a document from a complete in-memory HTTP response."""
        return cls(io.BytesIO(data), url=url, scan=scan)

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def header_names(self) -> frozenset[str]:
        return frozenset(self._headers)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self._headers.get(name.lower())

    def content_length(self) -> int:
        """Declared Content-Length, or -1 when absent or not a number."""
        value = self.header("content-length")
        if value is None or not value.isdigit():
            return -1
        return int(value)

    @property
    def is_feed(self) -> bool:
        return is_feed(self.mime_type)

    def body(self) -> codecs.StreamReader:
        """Hand out the raw body text stream instead of scanning it.

        Only possible before the XML scan has started; afterwards the stream
        is partly consumed. Taking the body makes the metrics unavailable.
        """
        with self._lock:
            if self._state is not ScanState.UNPARSED:
                raise GeoRssCountError(
                    ErrorCode.BODY_UNAVAILABLE,
                    "XML scan already started on this document",
                    url=self.url,
                    recoverable=False,
                )
            self._body_taken = True
            return self._reader

    # ------------------------------------------------------------------
    # Feed metrics (each triggers the one-time scan)
    # ------------------------------------------------------------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def namespaces(self) -> tuple[str, ...]:
        self._scan()
        return self._namespaces

    @property
    def geo_namespace(self) -> str | None:
        self._scan()
        return self._geo_namespace

    @property
    def is_georss(self) -> bool:
        return self.geo_namespace is not None

    @property
    def geo_tag_count(self) -> int:
        self._scan()
        return self._extractor.geo_tag_count if self._extractor else 0

    @property
    def location_count(self) -> int:
        self._scan()
        return self._extractor.location_count if self._extractor else 0

    @property
    def updated_at(self) -> int:
        self._scan()
        return self._extractor.updated_at if self._extractor else UNKNOWN_EPOCH

    def metrics(self) -> MetricTuple:
        return MetricTuple.of(self.updated_at, self.geo_tag_count, self.location_count)

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    def _scan(self) -> None:
        with self._lock:
            if self._state is not ScanState.UNPARSED:
                return
            if self._body_taken:
                raise GeoRssCountError(
                    ErrorCode.BODY_UNAVAILABLE,
                    "Body was handed out before the XML scan",
                    url=self.url,
                    recoverable=False,
                )

            # Nothing to parse from a non-feed
            if not self.is_feed:
                self._state = ScanState.NOT_GEORSS
                return

            events = XmlEventStream(self._reader, chunk_size=self._settings.chunk_size, url=self.url)

            try:
                sniffed = sniff_namespaces(events, event_limit=self._settings.namespace_event_limit)
            except XmlStructureError as exc:
                log.debug("xml_scan_aborted", phase="namespaces", **exc.to_dict())
                sniffed = None

            if sniffed is not None:
                self._namespaces = sniffed.namespaces
                self._geo_namespace = find_geo_namespace(
                    sniffed.namespaces, self._settings.geo_marker
                )
            self._state = ScanState.NAMESPACES_KNOWN

            # Only GeoRSS feeds are worth reading to the end
            if sniffed is None or self._geo_namespace is None:
                self._state = ScanState.NOT_GEORSS
                return

            self._extractor = MetricExtractor(self._geo_namespace)
            try:
                self._extractor.consume(events, first=sniffed.element)
            except XmlStructureError as exc:
                log.debug(
                    "xml_scan_aborted",
                    phase="metrics",
                    geo_tag_count=self._extractor.geo_tag_count,
                    **exc.to_dict(),
                )
            self._state = ScanState.FULLY_SCANNED
