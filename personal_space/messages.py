"""
Message feed: listing, creation and the partial-update rules.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from personal_space.db import DbClient, MessageRecord

AUDIO_TYPE = "audio"
AUDIO_CONTENT_PLACEHOLDER = "refer to binary endpoint"


def list_messages(
    db: DbClient, include_full_content: bool = False
) -> list[MessageRecord]:
    """Return every message, oldest first.

    Unless ``include_full_content`` is set, audio payloads are swapped for a
    placeholder; clients fetch the bytes from the audio endpoint instead.
    """
    records = db.list_messages()
    if include_full_content:
        return records
    return [
        replace(record, content=AUDIO_CONTENT_PLACEHOLDER)
        if record.type == AUDIO_TYPE
        else record
        for record in records
    ]


def create_message(
    db: DbClient,
    content: Optional[str],
    type: Optional[str] = "text",
    title: Optional[str] = None,
    artist: Optional[str] = None,
) -> MessageRecord:
    if not content:
        raise ValueError("Content is required")
    return db.create_message(content, type or "text", title=title, artist=artist)


def plan_message_update(fields: dict) -> dict:
    """
    Pick the columns an update request may touch.

    The rules are applied in order and the first match wins:

    1. content together with both title and artist: all three are written.
    2. title and/or artist: only those that were sent are written, any
       content in the request is ignored.
    3. content alone: only content is written.

    ``fields`` must only contain the keys the caller actually sent; an
    explicit None for title or artist clears that column.
    """
    content = fields.get("content")
    has_title = "title" in fields
    has_artist = "artist" in fields

    if content and has_title and has_artist:
        return {
            "content": content,
            "title": fields["title"],
            "artist": fields["artist"],
        }
    if has_title or has_artist:
        return {key: fields[key] for key in ("title", "artist") if key in fields}
    if content:
        return {"content": content}
    return {}


def update_message(db: DbClient, message_id: Optional[int], fields: dict) -> None:
    if not message_id:
        raise ValueError("ID is required")
    changes = plan_message_update(fields)
    if changes:
        db.update_message(message_id, changes)


def delete_message(db: DbClient, message_id: Optional[int]) -> None:
    if not message_id:
        raise ValueError("ID is required")
    db.delete_message(message_id)
