"""
Singleton profile record: lazily created on first access, coalesce-updated.
"""

from __future__ import annotations

from typing import Optional

from personal_space.db import DbClient, ProfileRecord


def get_profile(db: DbClient) -> Optional[ProfileRecord]:
    """
    Return the profile row, creating it with the default name and bio when the
    table is still empty. Returns None only if the row cannot be read back.
    """
    profile = db.get_profile()
    if profile is None:
        db.ensure_profile()
        profile = db.get_profile()
    return profile


def update_profile(
    db: DbClient,
    name: Optional[str] = None,
    bio: Optional[str] = None,
    avatar: Optional[str] = None,
    cover: Optional[str] = None,
) -> None:
    """
    Overwrite the fields given a non-None value; everything else keeps its
    stored value.
    """
    db.ensure_profile()
    values = {
        key: value
        for key, value in (
            ("name", name),
            ("bio", bio),
            ("avatar", avatar),
            ("cover", cover),
        )
        if value is not None
    }
    if values:
        db.update_profile(values)
