from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    XML_STRUCTURE = "XML_STRUCTURE"
    ARCHIVE_READ_FAILED = "ARCHIVE_READ_FAILED"
    BODY_UNAVAILABLE = "BODY_UNAVAILABLE"


class GeoRssCountError(Exception):
    """Base class for every expected failure raised by georsscount.

    Record-level errors are caught by the job driver, logged with
    ``to_dict()`` as the payload and counted. Run-level errors reach the CLI
    and end the process with exit status 1.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        url: str | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.url = url
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "url": self.url,
                "recoverable": self.recoverable,
            }
        }


class MalformedResponseError(GeoRssCountError):
    """The HTTP status line of a response record could not be parsed."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(ErrorCode.MALFORMED_RESPONSE, message, url=url)


class XmlStructureError(GeoRssCountError):
    """The XML body is not well formed. Ends a scan early, never a record."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(ErrorCode.XML_STRUCTURE, message, url=url)


class ArchiveReadError(GeoRssCountError):
    """An input archive could not be opened or iterated at all."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(ErrorCode.ARCHIVE_READ_FAILED, message, url=url, recoverable=False)
