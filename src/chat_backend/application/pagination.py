"""Keyset pagination over (created_at, id).

Cursor format: base64("<iso-timestamp>|<uuid>"), padding stripped.
"""
from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Protocol, Sequence
from uuid import UUID

from chat_backend.application.exceptions import ValidationError


def encode_cursor(ts: datetime, uid: UUID) -> str:
    raw = f"{ts.isoformat()}|{uid}"
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode()).decode()
        ts_str, uid_str = raw.split("|", 1)
        return datetime.fromisoformat(ts_str), UUID(uid_str)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError("Invalid cursor") from exc


class _Keyed(Protocol):
    id: UUID
    created_at: datetime


def next_cursor(items: Sequence[_Keyed], limit: int) -> str | None:
    """Cursor for the page after ``items``; None once a short page is returned."""
    if len(items) < limit or not items:
        return None
    last = items[-1]
    return encode_cursor(last.created_at, last.id)
