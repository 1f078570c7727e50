"""Flatten MIME entities into their decoded leaf parts."""

from .errors import (
    DepthExceeded,
    MalformedContentType,
    MIMEError,
    MissingBoundary,
    MultipartError,
    ReadFailure,
)
from .parser import DEFAULT_CONTENT_TYPE, flatten, parse_message
from .types import Header, Part

__all__ = [
    "flatten",
    "parse_message",
    "Header",
    "Part",
    "DEFAULT_CONTENT_TYPE",
    "MIMEError",
    "MalformedContentType",
    "MissingBoundary",
    "ReadFailure",
    "MultipartError",
    "DepthExceeded",
]
