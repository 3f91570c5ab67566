"""
HTTP routes for the personal space API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from personal_space import audio, messages, profile
from personal_space.auth import is_admin, require_admin
from personal_space.config import Settings
from personal_space.db import DbClient
from personal_space.dependencies import get_app_settings, get_db_client
from personal_space.schemas import (
    CreatedResponse,
    HealthResponse,
    MessageCreateRequest,
    MessageDeleteRequest,
    MessageResponse,
    MessageUpdateRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    SuccessResponse,
    VerifyAdminRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)):
    url = settings.database_url
    return HealthResponse(
        status="ok",
        database_configured=settings.database_configured,
        db_url_prefix=f"{url[:15]}..." if url else "none",
    )


@router.get(
    "/get-profile",
    response_model=ProfileResponse,
    response_model_exclude_unset=True,
)
def get_profile(db: DbClient = Depends(get_db_client)):
    record = profile.get_profile(db)
    return record.as_dict() if record else {}


@router.post(
    "/update-profile",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def update_profile(
    payload: ProfileUpdateRequest, db: DbClient = Depends(get_db_client)
):
    profile.update_profile(
        db,
        name=payload.name,
        bio=payload.bio,
        avatar=payload.avatar,
        cover=payload.cover,
    )
    return SuccessResponse()


@router.get("/get-messages", response_model=list[MessageResponse])
def get_messages(
    include_content: bool = Query(
        False, description="Return audio payloads instead of a placeholder"
    ),
    db: DbClient = Depends(get_db_client),
):
    records = messages.list_messages(db, include_full_content=include_content)
    return [record.as_dict() for record in records]


@router.post(
    "/create-message",
    response_model=CreatedResponse,
    dependencies=[Depends(require_admin)],
)
def create_message(
    payload: MessageCreateRequest, db: DbClient = Depends(get_db_client)
):
    try:
        record = messages.create_message(
            db,
            payload.content,
            payload.type,
            title=payload.title,
            artist=payload.artist,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CreatedResponse(id=record.id)


@router.post(
    "/upload-audio",
    response_model=CreatedResponse,
    dependencies=[Depends(require_admin)],
)
async def upload_audio(
    request: Request,
    title: str | None = Query(None),
    artist: str | None = Query(None),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_app_settings),
):
    raw = await request.body()
    if len(raw) > settings.max_body_bytes:
        raise HTTPException(status_code=413, detail="Payload too large")
    try:
        record = audio.upload_audio(db, raw, title=title, artist=artist)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CreatedResponse(id=record.id)


@router.get("/audio/{message_id}")
def get_audio(message_id: int, db: DbClient = Depends(get_db_client)):
    try:
        raw = audio.fetch_audio(db, message_id)
    except ValueError as exc:
        logger.error("Audio message %s has corrupt content", message_id)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if raw is None:
        raise HTTPException(status_code=404, detail="Audio not found")
    return Response(
        content=raw,
        media_type=audio.AUDIO_MEDIA_TYPE,
        headers={"Content-Length": str(len(raw))},
    )


@router.post(
    "/update-message",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def update_message(
    payload: MessageUpdateRequest, db: DbClient = Depends(get_db_client)
):
    # Only forward what the client sent; an explicit null clears title/artist.
    fields = payload.model_dump(exclude_unset=True, exclude={"id"})
    try:
        messages.update_message(db, payload.id, fields)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SuccessResponse()


@router.post(
    "/delete-message",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def delete_message(
    payload: MessageDeleteRequest, db: DbClient = Depends(get_db_client)
):
    try:
        messages.delete_message(db, payload.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SuccessResponse()


@router.post("/verify-admin", response_model=SuccessResponse)
def verify_admin(
    payload: VerifyAdminRequest, settings: Settings = Depends(get_app_settings)
):
    if not is_admin(payload.password, settings.admin_password):
        logger.warning("Rejected admin verification attempt")
        raise HTTPException(status_code=401, detail="Invalid password")
    return SuccessResponse()
