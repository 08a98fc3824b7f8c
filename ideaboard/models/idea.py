"""Idea model — team-submitted proposals on the idea board."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideaboard.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdeaStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    hackathon_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # ── JSON list (stored as Text for SQLite compat) ──
    tags_json: Mapped[str] = mapped_column(Text, default="[]")

    status: Mapped[IdeaStatus] = mapped_column(
        Enum(IdeaStatus, values_callable=lambda e: [m.value for m in e]),
        default=IdeaStatus.SUBMITTED,
    )
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    # Bumped on every write; guards read-then-write updates.
    version: Mapped[int] = mapped_column(Integer, default=1)

    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
