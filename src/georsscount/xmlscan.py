"""Streaming XML scan of a feed body.

One :class:`XmlEventStream` is opened per document and read strictly forward.
Namespace sniffing takes the first events off the stream; if the document
turns out to be GeoRSS, :class:`MetricExtractor` keeps consuming the same
stream to the end. The body is never parsed twice.

The parser never loads DTDs, never touches the network and never expands
external entities. A well-formedness error surfaces as
:class:`~georsscount.errors.XmlStructureError` from the iterator; callers keep
whatever they had accumulated up to that point.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lxml import etree

from georsscount.dates import UNKNOWN_EPOCH, to_epoch_seconds
from georsscount.errors import XmlStructureError
from georsscount.feeds import DATE_ELEMENTS
from georsscount.headers import BODY_ENCODING

if TYPE_CHECKING:
    import codecs

XmlEvent = tuple[str, Any]

_EVENTS = ("start", "end", "start-ns", "comment", "pi")


def split_tag(tag: str) -> tuple[str | None, str]:
    """``"{http://www.georss.org/georss}point"`` → ``("http://www.georss.org/georss", "point")``."""
    if tag[:1] == "{":
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


class XmlEventStream(Iterator[XmlEvent]):
    """Forward-only cursor of ``(event, payload)`` pairs over a text body.

    Payloads are lxml elements for ``start``/``end``/``comment``/``pi`` and
    ``(prefix, uri)`` pairs for ``start-ns``.
    """

    def __init__(
        self,
        reader: codecs.StreamReader,
        *,
        chunk_size: int = 65536,
        url: str | None = None,
    ) -> None:
        self._reader = reader
        self._chunk_size = chunk_size
        self._url = url
        self._parser = etree.XMLPullParser(
            events=_EVENTS,
            # The body was already decoded as UTF-8; ignore any XML declaration
            encoding=BODY_ENCODING,
            resolve_entities=False,
            load_dtd=False,
            no_network=True,
            dtd_validation=False,
        )
        self._events = self._pull()

    def __next__(self) -> XmlEvent:
        return next(self._events)

    def _pull(self) -> Iterator[XmlEvent]:
        while True:
            chunk = self._reader.read(self._chunk_size)
            try:
                if chunk:
                    self._parser.feed(chunk.encode(BODY_ENCODING))
                else:
                    self._parser.close()
            except etree.XMLSyntaxError as exc:
                # Events parsed before the error are still delivered
                yield from self._parser.read_events()
                raise XmlStructureError(f"Invalid XML: {exc}", url=self._url) from exc

            yield from self._parser.read_events()
            if not chunk:
                return


@dataclass(frozen=True)
class NamespaceScan:
    """Result of namespace sniffing.

    ``element`` is the namespace-declaring element whose ``start`` event the
    sniffer consumed; the extractor must still see it.
    """

    namespaces: tuple[str, ...] = ()
    element: Any = None


def _has_text_before(event: str, node: Any) -> bool:
    """Whether character data sits right before the tag that raised *event*.

    lxml reports no text events, so text runs are read off the tree: the
    previous sibling's tail or the parent's leading text for an opening tag,
    the last child's tail or the element's own text for a closing one.
    """
    if event == "end":
        return bool(node[-1].tail) if len(node) else bool(node.text)
    previous = node.getprevious()
    if previous is not None:
        return bool(previous.tail)
    parent = node.getparent()
    return parent is not None and bool(parent.text)


def sniff_namespaces(events: Iterator[XmlEvent], *, event_limit: int = 100) -> NamespaceScan:
    """Collect the namespace URIs declared on the first element that declares any.

    Gives up with an empty result after *event_limit* parse events. A run of
    text between two tags counts as one event; ``start-ns`` declarations
    belong to their element and are not counted.
    """
    declared: list[str] = []
    consumed = 0

    for event, payload in events:
        if event == "start-ns":
            declared.append(payload[1])
            continue

        if _has_text_before(event, payload):
            consumed += 1
            if consumed >= event_limit:
                break

        consumed += 1
        if event == "start" and declared:
            return NamespaceScan(namespaces=tuple(declared), element=payload)
        if consumed >= event_limit:
            break

    return NamespaceScan()


def find_geo_namespace(namespaces: tuple[str, ...], marker: str = "georss") -> str | None:
    """Return the first URI containing *marker* anywhere after its first character."""
    for uri in namespaces:
        if uri.find(marker) > 0:
            return uri
    return None


def fingerprint(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class MetricExtractor:
    """Counts geo tags, distinct locations and the newest date in a GeoRSS feed."""

    def __init__(self, geo_namespace: str) -> None:
        self.geo_namespace = geo_namespace
        self.geo_tag_count = 0
        self.location_hashes: set[str] = set()
        self.updated_at = UNKNOWN_EPOCH
        # Open elements whose text is still needed; subtrees are only freed at zero
        self._open_captures = 0

    @property
    def location_count(self) -> int:
        return len(self.location_hashes)

    def consume(self, events: Iterator[XmlEvent], *, first: Any = None) -> None:
        """Run to the end of *events*, starting with the already-read element *first*."""
        if first is not None:
            self.feed("start", first)
        for event, payload in events:
            self.feed(event, payload)

    def feed(self, event: str, element: Any) -> None:
        if event == "start":
            self._on_start(element)
        elif event == "end":
            self._on_end(element)

    def _on_start(self, element: Any) -> None:
        uri, local = split_tag(element.tag)
        if uri == self.geo_namespace:
            self.geo_tag_count += 1
            self._open_captures += 1
        if local in DATE_ELEMENTS:
            self._open_captures += 1

    def _on_end(self, element: Any) -> None:
        uri, local = split_tag(element.tag)
        if uri == self.geo_namespace:
            self.location_hashes.add(fingerprint(element.xpath("string()")))
            self._open_captures -= 1
        if local in DATE_ELEMENTS:
            epoch = to_epoch_seconds(element.xpath("string()").strip())
            self.updated_at = max(self.updated_at, epoch)
            self._open_captures -= 1

        if self._open_captures == 0:
            _release(element)


def _release(element: Any) -> None:
    """Free a finished element and its already-processed preceding siblings."""
    element.clear(keep_tail=True)
    parent = element.getparent()
    if parent is None:
        return
    while element.getprevious() is not None:
        del parent[0]
