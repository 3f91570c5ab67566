"""
Dependency wiring for the FastAPI app.

The store handle is built once by ``create_app`` and kept on ``app.state``;
routes receive it through these dependencies.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, Request

from personal_space.config import Settings
from personal_space.db import DbClient, InMemoryDbClient, SqlDbClient

logger = logging.getLogger(__name__)


def build_db_client(settings: Settings) -> Optional[DbClient]:
    """
    Return the store selected by settings, or None when no database is set.
    """
    if settings.use_in_memory_backends:
        return InMemoryDbClient(
            default_name=settings.default_profile_name,
            default_bio=settings.default_profile_bio,
        )
    if not settings.database_url:
        logger.error("DATABASE_URL is not set; data routes will fail")
        return None
    return SqlDbClient(
        settings.database_url,
        default_name=settings.default_profile_name,
        default_bio=settings.default_profile_bio,
    )


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(request: Request) -> DbClient:
    db = request.app.state.db_client
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured on server")
    return db
