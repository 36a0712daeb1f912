from __future__ import annotations

import base64
import binascii
from typing import Any, Mapping


class BlobDecodeError(ValueError):
    """A blob payload could not be turned into text."""


def decode_blob(payload: Mapping[str, Any]) -> str:
    if not isinstance(payload, Mapping):
        raise BlobDecodeError("blob payload is not an object")

    # Git Blobs API returns base64 (with embedded newlines) or, rarely, utf-8
    encoding = str(payload.get("encoding") or "base64").lower()
    content = payload.get("content")
    if not isinstance(content, str):
        raise BlobDecodeError("blob payload has no content")

    if encoding == "utf-8":
        return content
    if encoding != "base64":
        raise BlobDecodeError(f"unsupported blob encoding: {encoding}")

    try:
        raw = base64.b64decode(content.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise BlobDecodeError(f"invalid base64 content: {e}") from e

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BlobDecodeError(f"content is not valid UTF-8: {e}") from e
