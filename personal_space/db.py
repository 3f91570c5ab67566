"""
Database abstraction for a SQL store and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from personal_space.config import get_settings

logger = logging.getLogger(__name__)

PROFILE_ID = 1


class StoreError(RuntimeError):
    """Raised when the underlying database rejects a statement."""


class DbClient(Protocol):
    """Interface for database access."""

    def get_profile(self) -> Optional["ProfileRecord"]:
        ...

    def ensure_profile(self) -> None:
        ...

    def update_profile(self, values: dict) -> None:
        ...

    def list_messages(self) -> list["MessageRecord"]:
        ...

    def create_message(
        self,
        content: str,
        type: str = "text",
        title: Optional[str] = None,
        artist: Optional[str] = None,
    ) -> "MessageRecord":
        ...

    def update_message(self, message_id: int, values: dict) -> None:
        ...

    def delete_message(self, message_id: int) -> None:
        ...

    def get_message(
        self, message_id: int, type: Optional[str] = None
    ) -> Optional["MessageRecord"]:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProfileRecord:
    id: int = PROFILE_ID
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    cover: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "bio": self.bio,
            "avatar": self.avatar,
            "cover": self.cover,
        }


@dataclass
class MessageRecord:
    id: int
    content: str
    type: str = "text"
    title: Optional[str] = None
    artist: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "type": self.type,
            "title": self.title,
            "artist": self.artist,
            "created_at": self.created_at.isoformat(),
        }


PROFILE_FIELDS = ("name", "bio", "avatar", "cover")
MESSAGE_FIELDS = ("content", "title", "artist")


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(
        self,
        default_name: Optional[str] = None,
        default_bio: Optional[str] = None,
    ):
        settings = get_settings()
        self.default_name = default_name or settings.default_profile_name
        self.default_bio = default_bio or settings.default_profile_bio
        self.profile: Optional[ProfileRecord] = None
        self.messages: Dict[int, MessageRecord] = {}
        self.next_id = 1
        self.writes = 0
        self._lock = threading.Lock()

    def get_profile(self) -> Optional[ProfileRecord]:
        if self.profile is None:
            return None
        return replace(self.profile)

    def ensure_profile(self) -> None:
        with self._lock:
            if self.profile is None:
                self.profile = ProfileRecord(
                    name=self.default_name, bio=self.default_bio
                )
                self.writes += 1

    def update_profile(self, values: dict) -> None:
        with self._lock:
            if self.profile is None:
                return
            for key in PROFILE_FIELDS:
                if key in values:
                    setattr(self.profile, key, values[key])
            self.writes += 1

    def list_messages(self) -> list[MessageRecord]:
        records = sorted(
            self.messages.values(), key=lambda m: (m.created_at, m.id)
        )
        return [replace(record) for record in records]

    def create_message(
        self,
        content: str,
        type: str = "text",
        title: Optional[str] = None,
        artist: Optional[str] = None,
    ) -> MessageRecord:
        with self._lock:
            record = MessageRecord(
                id=self.next_id,
                content=content,
                type=type,
                title=title,
                artist=artist,
            )
            self.messages[record.id] = record
            self.next_id += 1
            self.writes += 1
            return replace(record)

    def update_message(self, message_id: int, values: dict) -> None:
        with self._lock:
            record = self.messages.get(message_id)
            if not record:
                return
            for key in MESSAGE_FIELDS:
                if key in values:
                    setattr(record, key, values[key])
            self.writes += 1

    def delete_message(self, message_id: int) -> None:
        with self._lock:
            self.messages.pop(message_id, None)
            self.writes += 1

    def get_message(
        self, message_id: int, type: Optional[str] = None
    ) -> Optional[MessageRecord]:
        record = self.messages.get(message_id)
        if not record or (type is not None and record.type != type):
            return None
        return replace(record)


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        default_name: Optional[str] = None,
        default_bio: Optional[str] = None,
        **engine_kwargs,
    ):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        settings = get_settings()
        self.default_name = default_name or settings.default_profile_name
        self.default_bio = default_bio or settings.default_profile_bio
        engine_kwargs.setdefault("pool_pre_ping", True)
        if not database_url.startswith("sqlite"):
            engine_kwargs.setdefault("pool_recycle", 1800)
        self.engine = create_engine(database_url, future=True, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_profile_record(self, row: "SettingsRow") -> ProfileRecord:
        return ProfileRecord(
            id=row.id,
            name=row.name,
            bio=row.bio,
            avatar=row.avatar,
            cover=row.cover,
        )

    def _to_message_record(self, row: "MessageRow") -> MessageRecord:
        return MessageRecord(
            id=row.id,
            content=row.content,
            type=row.type,
            title=row.title,
            artist=row.artist,
            created_at=row.created_at,
        )

    def _insert_default_profile(self, session: Session) -> None:
        values = {
            "id": PROFILE_ID,
            "name": self.default_name,
            "bio": self.default_bio,
        }
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(SettingsRow).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(SettingsRow).values(**values)
        else:
            stmt = None

        if stmt is not None:
            session.execute(stmt.on_conflict_do_nothing(index_elements=["id"]))
            session.commit()
            return

        # No native insert-or-nothing: lean on the primary key instead.
        try:
            session.add(SettingsRow(**values))
            session.commit()
        except IntegrityError:
            session.rollback()

    def get_profile(self) -> Optional[ProfileRecord]:
        try:
            with self.Session() as session:
                row = session.get(SettingsRow, PROFILE_ID)
                return self._to_profile_record(row) if row else None
        except SQLAlchemyError as exc:
            logger.exception("Failed to read profile")
            raise StoreError(str(exc)) from exc

    def ensure_profile(self) -> None:
        try:
            with self.Session() as session:
                self._insert_default_profile(session)
        except SQLAlchemyError as exc:
            logger.exception("Failed to create default profile")
            raise StoreError(str(exc)) from exc

    def update_profile(self, values: dict) -> None:
        changes = {key: values[key] for key in PROFILE_FIELDS if key in values}
        if not changes:
            return
        try:
            with self.Session() as session:
                session.execute(
                    update(SettingsRow)
                    .where(SettingsRow.id == PROFILE_ID)
                    .values(**changes)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to update profile")
            raise StoreError(str(exc)) from exc

    def list_messages(self) -> list[MessageRecord]:
        try:
            with self.Session() as session:
                stmt = select(MessageRow).order_by(
                    MessageRow.created_at.asc(), MessageRow.id.asc()
                )
                rows = session.execute(stmt).scalars().all()
                return [self._to_message_record(row) for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Failed to list messages")
            raise StoreError(str(exc)) from exc

    def create_message(
        self,
        content: str,
        type: str = "text",
        title: Optional[str] = None,
        artist: Optional[str] = None,
    ) -> MessageRecord:
        try:
            with self.Session() as session:
                row = MessageRow(
                    content=content,
                    type=type,
                    title=title,
                    artist=artist,
                    created_at=_utcnow(),
                )
                session.add(row)
                session.commit()
                session.refresh(row)
                return self._to_message_record(row)
        except SQLAlchemyError as exc:
            logger.exception("Failed to create message")
            raise StoreError(str(exc)) from exc

    def update_message(self, message_id: int, values: dict) -> None:
        changes = {key: values[key] for key in MESSAGE_FIELDS if key in values}
        if not changes:
            return
        try:
            with self.Session() as session:
                session.execute(
                    update(MessageRow)
                    .where(MessageRow.id == message_id)
                    .values(**changes)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to update message %s", message_id)
            raise StoreError(str(exc)) from exc

    def delete_message(self, message_id: int) -> None:
        try:
            with self.Session() as session:
                session.execute(delete(MessageRow).where(MessageRow.id == message_id))
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete message %s", message_id)
            raise StoreError(str(exc)) from exc

    def get_message(
        self, message_id: int, type: Optional[str] = None
    ) -> Optional[MessageRecord]:
        try:
            with self.Session() as session:
                stmt = select(MessageRow).where(MessageRow.id == message_id)
                if type is not None:
                    stmt = stmt.where(MessageRow.type == type)
                row = session.execute(stmt).scalar_one_or_none()
                return self._to_message_record(row) if row else None
        except SQLAlchemyError as exc:
            logger.exception("Failed to read message %s", message_id)
            raise StoreError(str(exc)) from exc


Base = declarative_base()


class SettingsRow(Base):
    __tablename__ = "settings"
    __table_args__ = (CheckConstraint("id = 1", name="settings_singleton"),)

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    avatar = Column(Text, nullable=True)
    cover = Column(Text, nullable=True)


class MessageRow(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default="text", index=True)
    title = Column(Text, nullable=True)
    artist = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
