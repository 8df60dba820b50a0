"""Opaque Base64 cursors for id-ordered pagination (newest first)."""

import base64
import json

from src.ps_common.amounts import BIGINT_MAX


def cursor_encode(last_id: int) -> str:
    """Encode the last id of a page into an opaque cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor back to the last seen id. Returns None on error or out-of-range ids."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        last_id = int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None
    return last_id if 0 <= last_id <= BIGINT_MAX else None
