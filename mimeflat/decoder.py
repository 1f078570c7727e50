"""Helpers for decoding MIME content types and transfer-encoded bodies."""

from __future__ import annotations

import base64
import binascii
import quopri
import re
from email.headerregistry import HeaderRegistry
from typing import Dict, Optional, Tuple

from .errors import MalformedContentType, ReadFailure

_registry = HeaderRegistry()

# name*=charset'lang'value or name*N*=value
_EXTENDED_PARAM = re.compile(r'([^\s;=*"]+)\*(?:\d+\*)?\s*=\s*([^;\s]*)')
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def parse_media_type(value: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """
    Split a Content-Type value into its lowercased media type and a dict of
    parameters keyed by lowercased name (RFC 2231 values joined and decoded).
    Any parse defect reported by the email package is fatal.
    """
    if value is None:
        raise MalformedContentType("", "no media type")
    header = _registry("content-type", value)
    if header.defects:
        raise MalformedContentType(value, "; ".join(str(d) for d in header.defects))

    params = dict(header.params)
    # extended values with broken %-escapes are dropped, not guessed at
    for m in _EXTENDED_PARAM.finditer(value):
        if _BAD_PERCENT.search(m.group(2)):
            params.pop(m.group(1).lower(), None)
    return header.content_type, params


def decode_base64(data: bytes) -> bytes:
    """
    Standard-alphabet base64 with required padding. CR and LF are skipped;
    any other byte outside the alphabet is an error.
    """
    try:
        return base64.b64decode(data.translate(None, b"\r\n"), validate=True)
    except binascii.Error as exc:
        raise ReadFailure(f"base64: {exc}") from exc


def decode_quoted_printable(data: bytes) -> bytes:
    return quopri.decodestring(data)


def b64url_decode(data: str | bytes | None) -> bytes:
    """
    Decode the URL-safe base64 blobs Gmail returns (without guaranteed padding).
    """
    if not data:
        return b""
    if isinstance(data, str):
        raw = data.encode()
    else:
        raw = data
    padding = (-len(raw)) % 4
    if padding:
        raw += b"=" * padding
    try:
        return base64.urlsafe_b64decode(raw)
    except (binascii.Error, ValueError) as exc:
        raise ReadFailure(f"invalid url-safe base64: {exc}") from exc


__all__ = [
    "parse_media_type",
    "decode_base64",
    "decode_quoted_printable",
    "b64url_decode",
]
