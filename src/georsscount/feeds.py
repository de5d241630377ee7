"""Feed classification tables.

Both tables are fixed at import time and shared read-only by every document.
"""

from __future__ import annotations

# MIME types that mean the response is possibly an RSS feed. Matched exactly.
FEED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "text/xml",
        "text/rss+xml",
        "application/rss+xml",
    }
)

# Local element names that may carry a feed or entry date, in any namespace.
DATE_ELEMENTS: frozenset[str] = frozenset({"pubDate", "updated", "published"})


def is_feed(mime_type: str | None) -> bool:
    """Return True iff *mime_type* is one of the feed MIME types."""
    return mime_type in FEED_MIME_TYPES
