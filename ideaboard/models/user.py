"""User model — the slice of a profile the idea board needs."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ideaboard.database import Base
from ideaboard.models.idea import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    # ── Identity ──
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
