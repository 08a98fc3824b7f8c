"""Idea submission."""

import logging
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ideaboard.exceptions import ValidationError
from ideaboard.models.idea import IdeaStatus
from ideaboard.schemas.idea import IdeaCreate, IdeaOut
from ideaboard.services.base import store_operation, utcnow
from ideaboard.services.events import (
    IDEA_CREATED,
    IDEA_SUBMISSION,
    EventDispatcher,
    IdeaEvent,
    PointsAward,
)
from ideaboard.services.store import IDEAS, DocumentStore

logger = logging.getLogger(__name__)


def clean_tags(tags: Optional[List[str]]) -> List[str]:
    return [tag.strip() for tag in tags or [] if tag and tag.strip()]


class IdeaSubmission:
    def __init__(self, store: DocumentStore, dispatcher: EventDispatcher):
        self.store = store
        self.dispatcher = dispatcher

    @store_operation("create idea")
    async def create_idea(
        self,
        team_id: str,
        hackathon_id: str,
        payload: Union[IdeaCreate, dict],
        submitter_name: str = "Team Member",
    ) -> IdeaOut:
        if not isinstance(payload, IdeaCreate):
            try:
                payload = IdeaCreate.model_validate(payload)
            except PydanticValidationError as exc:
                raise ValidationError(
                    "Invalid idea payload", {"errors": [err["msg"] for err in exc.errors()]}
                ) from None

        title = (payload.title or "").strip()
        description = (payload.description or "").strip()
        if not title or not description:
            raise ValidationError("Title and description are required")

        now = utcnow()
        doc = await self.store.create(
            IDEAS,
            {
                "team_id": team_id,
                "hackathon_id": hackathon_id,
                "title": title,
                "description": description,
                "tags": clean_tags(payload.tags),
                "status": IdeaStatus.SUBMITTED,
                "vote_count": 0,
                "created_by": payload.created_by,
                "created_at": now,
                "updated_at": now,
            },
        )
        idea = IdeaOut.model_validate(doc)
        logger.info(f"Idea {idea.id} submitted to team {team_id} by {payload.created_by}")

        await self.dispatcher.award(
            PointsAward(
                user_id=idea.created_by,
                team_id=team_id,
                action=IDEA_SUBMISSION,
                hackathon_id=hackathon_id,
                display_name=submitter_name,
            )
        )
        await self.dispatcher.publish(
            IdeaEvent(
                event_type=IDEA_CREATED,
                team_id=team_id,
                hackathon_id=hackathon_id,
                text=f'💡 {submitter_name} submitted a new idea: "{title}"',
                metadata={
                    "idea_id": idea.id,
                    "idea_title": title,
                    "created_by": submitter_name,
                    "status": idea.status.value,
                    "tags": list(idea.tags),
                },
            )
        )
        return idea
