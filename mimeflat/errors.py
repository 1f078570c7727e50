"""Exceptions raised while flattening a MIME entity."""

from __future__ import annotations

from typing import Optional


class MIMEError(Exception):
    """Base class for every error raised by mimeflat."""


class MalformedContentType(MIMEError, ValueError):
    """A Content-Type value does not follow the media-type grammar."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"malformed content type {value!r}: {reason}")
        self.value = value
        self.reason = reason


class MissingBoundary(MIMEError):
    """A multipart Content-Type carries no boundary parameter."""

    def __init__(self, media_type: str):
        super().__init__(f"{media_type} has no boundary parameter")
        self.media_type = media_type


class ReadFailure(MIMEError):
    """
    Reading the raw body, a sub-entity or a decoding stream failed.
    The underlying exception, when there is one, is chained as __cause__.
    """


class MultipartError(ReadFailure):
    """Boundary framing of a multipart body is broken."""


class DepthExceeded(MIMEError):
    """
    Multipart nesting went deeper than max_depth, or, with no max_depth,
    deeper than the interpreter's recursion limit allows.
    """

    def __init__(self, max_depth: Optional[int] = None):
        if max_depth is None:
            super().__init__("multipart nesting too deep to parse")
        else:
            super().__init__(f"multipart nesting exceeds max_depth={max_depth}")
        self.max_depth = max_depth


__all__ = [
    "MIMEError",
    "MalformedContentType",
    "MissingBoundary",
    "ReadFailure",
    "MultipartError",
    "DepthExceeded",
]
