"""
Audio messages are stored as base64 data URIs in the message content column.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from personal_space.db import DbClient, MessageRecord
from personal_space.messages import AUDIO_TYPE

logger = logging.getLogger(__name__)

AUDIO_MEDIA_TYPE = "audio/mpeg"
AUDIO_DATA_PREFIX = f"data:{AUDIO_MEDIA_TYPE};base64,"
DEFAULT_TITLE = "Untitled"
DEFAULT_ARTIST = "Unknown Artist"


def encode_audio(raw: bytes) -> str:
    if not raw:
        raise ValueError("Audio data is required")
    return AUDIO_DATA_PREFIX + base64.b64encode(raw).decode("ascii")


def decode_audio(content: str) -> bytes:
    # Older rows were saved as bare base64 without the data URI header.
    if "," in content:
        content = content.split(",", 1)[1]
    try:
        return base64.b64decode(content, validate=True)
    except binascii.Error as exc:
        raise ValueError("Stored audio is not valid base64") from exc


def upload_audio(
    db: DbClient,
    raw: bytes,
    title: Optional[str] = None,
    artist: Optional[str] = None,
) -> MessageRecord:
    content = encode_audio(raw)
    record = db.create_message(
        content,
        AUDIO_TYPE,
        title=title or DEFAULT_TITLE,
        artist=artist or DEFAULT_ARTIST,
    )
    logger.info("Stored audio message %s (%d bytes)", record.id, len(raw))
    return record


def fetch_audio(db: DbClient, message_id: int) -> Optional[bytes]:
    record = db.get_message(message_id, type=AUDIO_TYPE)
    if record is None:
        return None
    return decode_audio(record.content)
