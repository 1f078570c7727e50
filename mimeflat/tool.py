"""Utilities for fetching Gmail messages and summarizing their flattened parts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

from .decoder import b64url_decode, parse_media_type
from .errors import MalformedContentType
from .parser import CONTENT_TRANSFER_ENCODING, CONTENT_TYPE, parse_message
from .types import Part

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/gmail.readonly",)
PREVIEW_CHARS = 80


def summarize_part(part: Part, *, preview_chars: int = PREVIEW_CHARS) -> Dict[str, Any]:
    """
    Reduce a Part to JSON-friendly fields. Text bodies get a short preview.
    """
    content_type = part.header.get(CONTENT_TYPE, "") or ""
    try:
        media_type, params = parse_media_type(content_type)
    except MalformedContentType:
        media_type, params = content_type, {}

    summary: Dict[str, Any] = {
        "content_type": media_type,
        "transfer_encoding": part.header.get(CONTENT_TRANSFER_ENCODING),
        "size": len(part.body),
    }
    if params.get("charset"):
        summary["charset"] = params["charset"]
    if media_type.startswith("text/"):
        # display only; no charset handling
        text = part.body.decode("utf-8", "replace").strip()
        summary["preview"] = text[:preview_chars]
    return summary


def summarize_parts(parts: Iterable[Part], **kwargs) -> List[Dict[str, Any]]:
    return [summarize_part(p, **kwargs) for p in parts]


def flatten_gmail_message(msg: Dict[str, Any], **options) -> List[Part]:
    """
    Flatten a Gmail API message fetched with format="raw".
    Keyword options are passed on to flatten().
    """
    if "raw" not in msg:
        raise ValueError("message has no 'raw' field; fetch it with format='raw'")
    raw = b64url_decode(msg["raw"])
    logger.debug("flattening gmail message %s (%d bytes)", msg.get("id", "?"), len(raw))
    return parse_message(raw, **options)


def _google():
    """Import the Google client stack lazily; only the Gmail helpers need it."""
    from google.auth.transport.requests import Request
    from google.oauth2.credentials import Credentials
    from google_auth_oauthlib.flow import InstalledAppFlow
    from googleapiclient.discovery import build

    return Request, Credentials, InstalledAppFlow, build


def load_credentials(
    *,
    token_path: str | Path = "token.json",
    client_secret_path: str | Path = "client_secret.json",
    scopes: Sequence[str] = SCOPES,
):
    """
    Return usable read-only Gmail credentials.

    A cached token is reused while valid and refreshed when it has expired;
    otherwise the installed-app consent flow runs. Whatever comes out is
    written back to `token_path`.
    """
    Request, Credentials, InstalledAppFlow, _ = _google()
    token_path = Path(token_path)

    creds = None
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), scopes)
        if creds.valid:
            return creds

    if creds and creds.expired and creds.refresh_token:
        logger.info("refreshing gmail token from %s", token_path)
        creds.refresh(Request())
    else:
        client_secret_path = Path(client_secret_path)
        if not client_secret_path.exists():
            raise FileNotFoundError(
                f"client_secret file not found at {client_secret_path}. "
                "Download it from Google Cloud Console."
            )
        logger.info("running gmail consent flow with %s", client_secret_path)
        flow = InstalledAppFlow.from_client_secrets_file(str(client_secret_path), scopes)
        creds = flow.run_local_server(port=0)
    token_path.write_text(creds.to_json())
    return creds


def build_gmail_service(*, cache_discovery: bool = False, **credential_options):
    """
    Authenticated Gmail API client. Keyword options go to load_credentials().
    """
    build = _google()[3]
    creds = load_credentials(**credential_options)
    return build("gmail", "v1", credentials=creds, cache_discovery=cache_discovery)


def list_message_ids(
    gmail_service,
    *,
    max_results: int = 5,
    label_ids: Iterable[str] | None = None,
) -> List[str]:
    """
    Most recent message IDs, newest first, optionally filtered by label.
    """
    request = gmail_service.users().messages().list(
        userId="me", maxResults=max_results, labelIds=list(label_ids or [])
    )
    return [m["id"] for m in request.execute().get("messages", [])]


def fetch_raw_message(gmail_service, message_id: str) -> bytes:
    """
    RFC 822 bytes of one message, requested with format="raw".
    """
    msg = gmail_service.users().messages().get(userId="me", id=message_id, format="raw").execute()
    return b64url_decode(msg.get("raw"))


def iter_flattened_messages(gmail_service, *, max_results: int = 5,
                            label_ids: Iterable[str] | None = None,
                            **options) -> Iterator[Tuple[str, List[Part]]]:
    """
    Yield (message_id, parts) for the most recent messages.
    Keyword options are passed on to flatten().
    """
    for message_id in list_message_ids(gmail_service, max_results=max_results, label_ids=label_ids):
        yield message_id, parse_message(fetch_raw_message(gmail_service, message_id), **options)
