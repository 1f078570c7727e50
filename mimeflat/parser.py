from __future__ import annotations
import io
import logging
import re
from email import errors as email_errors
from email.feedparser import FeedParser
from email.generator import Generator
from email.message import Message
from email.policy import compat32
from typing import BinaryIO, List, Mapping, Optional, Union

from .decoder import decode_base64, decode_quoted_printable, parse_media_type
from .errors import DepthExceeded, MissingBoundary, MultipartError, ReadFailure
from .types import Header, Part

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"
CONTENT_TRANSFER_ENCODING = "Content-Transfer-Encoding"
MULTIPART = "multipart/"
BOUNDARY = "boundary"
QUOTED_PRINTABLE = "quoted-printable"
BASE_64 = "base64"
DEFAULT_CONTENT_TYPE = "text/plain; charset=us-ascii"

CHUNK_SIZE = 8192

HeaderLike = Union[Header, Mapping]
Source = Union[bytes, bytearray, BinaryIO]

# Bodies go through the parser as latin-1 text so every byte maps back 1:1.
_CHARSET = "latin-1"
_CRLF = compat32.clone(linesep="\r\n")
_FOLD = re.compile(r"\r?\n(?=[ \t])")
_FRAMING_DEFECTS = (
    email_errors.StartBoundaryNotFoundDefect,
    email_errors.CloseBoundaryNotFoundDefect,
)

# ------------------ Public API ------------------

def flatten(
    headers: HeaderLike,
    body: Source,
    *,
    default_content_type: str = DEFAULT_CONTENT_TYPE,
    max_depth: Optional[int] = None,
) -> List[Part]:
    """
    Walk a MIME entity and return every leaf part, in document order, with its
    transfer encoding removed. Multipart containers are expanded recursively.

    `headers` is never modified; a missing Content-Type is set on a copy.
    `max_depth` caps how many multipart levels may nest below this entity
    (None: no limit other than the interpreter's recursion limit).
    """
    header = with_default_content_type(headers, default_content_type)
    block = "".join(f"{name}: {value}\r\n" for name, values in header.items() for value in values)
    try:
        msg = _read_message(body, block + "\r\n")
        return _flatten(header, msg, default_content_type, max_depth, 0)
    except RecursionError as exc:
        raise DepthExceeded(max_depth) from exc

def parse_message(source: Source, **options) -> List[Part]:
    """
    Parse a whole RFC 822 message (header block + body) and flatten it.
    Accepts the same keyword options as flatten().
    """
    default_content_type = options.get("default_content_type", DEFAULT_CONTENT_TYPE)
    try:
        msg = _read_message(source)
        header = with_default_content_type(_header_of(msg), default_content_type)
        return _flatten(header, msg, default_content_type, options.get("max_depth"), 0)
    except RecursionError as exc:
        raise DepthExceeded(options.get("max_depth")) from exc

def with_default_content_type(headers: HeaderLike, default_content_type: str = DEFAULT_CONTENT_TYPE) -> Header:
    """
    Copy of `headers` that is guaranteed to carry a Content-Type.
    """
    header = Header(headers)
    if CONTENT_TYPE not in header:
        header.set(CONTENT_TYPE, default_content_type)
    return header

def unwrap_transfer_encoding(header: Header, payload: bytes) -> bytes:
    """
    Undo the entity's Content-Transfer-Encoding. Only the exact tokens
    "quoted-printable" and "base64" are decoded.
    """
    encoding = header.get(CONTENT_TRANSFER_ENCODING)
    if encoding == QUOTED_PRINTABLE:
        return decode_quoted_printable(payload)
    if encoding == BASE_64:
        return decode_base64(payload)
    return payload

# ------------------ email package glue ------------------

def _read_message(source: Source, header_block: str = "") -> Message:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    parser = FeedParser(policy=compat32)
    parser.feed(header_block)
    try:
        for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
            parser.feed(chunk.decode(_CHARSET))
    except OSError as exc:
        raise ReadFailure(f"reading MIME body failed: {exc}") from exc
    return parser.close()

def _header_of(msg: Message) -> Header:
    header = Header()
    for name, value in msg.items():
        value = _FOLD.sub("", value).strip()
        header.add(name, value.encode(_CHARSET).decode("utf-8", "surrogateescape"))
    return header

def _payload_bytes(msg: Message) -> bytes:
    payload = msg.get_payload()
    if isinstance(payload, list):
        # message/* bodies are parsed into sub-messages; write them back out
        out = io.StringIO()
        Generator(out, mangle_from_=False, maxheaderlen=0, policy=_CRLF).flatten(msg)
        text = out.getvalue()
        if text.startswith("\r\n"):
            payload = text[2:]
        else:
            payload = text.split("\r\n\r\n", 1)[1]
    return payload.encode(_CHARSET)

# ------------------ recursion ------------------

def _flatten(header: Header, msg: Message, default_content_type: str,
             max_depth: Optional[int], depth: int) -> List[Part]:
    media_type, params = parse_media_type(header.get(CONTENT_TYPE))
    if not media_type.startswith(MULTIPART):
        return [_leaf(header, msg)]

    boundary = params.get(BOUNDARY)
    if boundary is None:
        raise MissingBoundary(media_type)
    for defect in msg.defects:
        if isinstance(defect, _FRAMING_DEFECTS):
            raise MultipartError(f"{media_type} (boundary={boundary!r}): {defect.__class__.__name__}")
    payload = msg.get_payload()
    if not isinstance(payload, list):
        raise MultipartError(f"{media_type} (boundary={boundary!r}) has no parts")
    logger.debug("entering %s (boundary=%r, depth=%d)", media_type, boundary, depth)

    parts: List[Part] = []
    for sub in payload:
        sub_header = with_default_content_type(_header_of(sub), default_content_type)
        sub_type, _ = parse_media_type(sub_header.get(CONTENT_TYPE))
        if sub_type.startswith(MULTIPART):
            if max_depth is not None and depth >= max_depth:
                raise DepthExceeded(max_depth)
            parts.extend(_flatten(sub_header, sub, default_content_type, max_depth, depth + 1))
        else:
            parts.append(_leaf(sub_header, sub))
    return parts

def _leaf(header: Header, msg: Message) -> Part:
    body = unwrap_transfer_encoding(header, _payload_bytes(msg))
    logger.debug(
        "leaf %s (encoding=%s, %d bytes)",
        header.get(CONTENT_TYPE), header.get(CONTENT_TRANSFER_ENCODING) or "identity", len(body),
    )
    return Part(header=header, body=body)
