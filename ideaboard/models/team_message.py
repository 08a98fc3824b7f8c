"""Team message model — system messages posted to a team's chat feed."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideaboard.database import Base
from ideaboard.models.idea import new_id, utcnow


class TeamMessage(Base):
    __tablename__ = "team_messages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    hackathon_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    msg_type: Mapped[str] = mapped_column(String(40), default="system")
    metadata_json: Mapped[str] = mapped_column(Text, default="{}")
    is_bot: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
