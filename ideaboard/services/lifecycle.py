"""
Idea status management.

Any of the five statuses may be set explicitly; the only automatic move is
submitted → approved once an idea's vote count reaches the threshold.
"""

import logging
from typing import Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from ideaboard.exceptions import PropagatedError, StaleDocumentError, ValidationError
from ideaboard.models.idea import IdeaStatus
from ideaboard.schemas.idea import IdeaOut
from ideaboard.services.base import fetch_idea, store_operation, utcnow
from ideaboard.services.events import (
    IDEA_AUTO_APPROVED,
    IDEA_STATUS_CHANGED,
    EventDispatcher,
    IdeaEvent,
)
from ideaboard.services.store import IDEAS, DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_AUTO_APPROVAL_THRESHOLD = 3

STATUS_MESSAGES = {
    IdeaStatus.APPROVED: '✅ "{title}" was approved',
    IdeaStatus.IN_PROGRESS: '🔄 "{title}" is now in progress',
    IdeaStatus.COMPLETED: '✅ "{title}" has been completed',
    IdeaStatus.REJECTED: '❌ "{title}" was rejected',
}


def parse_status(value) -> IdeaStatus:
    try:
        return IdeaStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in IdeaStatus)
        raise ValidationError(
            f"Invalid status: {value!r}. Must be one of: {allowed}",
            {"status": str(value)},
        ) from None


class LifecycleManager:
    def __init__(
        self,
        store: DocumentStore,
        dispatcher: EventDispatcher,
        auto_approval_threshold: int = DEFAULT_AUTO_APPROVAL_THRESHOLD,
        max_retries: int = 5,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.auto_approval_threshold = auto_approval_threshold
        self.max_retries = max(1, max_retries)

    @store_operation("update idea status")
    async def update_idea_status(self, idea_id: str, status, actor_name: str = "system") -> IdeaOut:
        """Set ``status`` unconditionally; only enum membership is checked."""
        new_status = parse_status(status)
        idea = await fetch_idea(self.store, idea_id)

        doc = await self.store.update(
            IDEAS, idea_id, {"status": new_status, "updated_at": utcnow()}
        )
        updated = IdeaOut.model_validate(doc)
        logger.info(f"Idea {idea_id} status {idea.status.value} -> {new_status.value} by {actor_name}")

        template = STATUS_MESSAGES.get(new_status, '📝 "{title}" status changed to {status}')
        await self.dispatcher.publish(
            IdeaEvent(
                event_type=IDEA_STATUS_CHANGED,
                team_id=idea.team_id,
                hackathon_id=idea.hackathon_id,
                text=template.format(title=idea.title, status=new_status.value),
                metadata={
                    "idea_id": idea_id,
                    "idea_title": idea.title,
                    "old_status": idea.status.value,
                    "new_status": new_status.value,
                    "updated_by": actor_name,
                },
            )
        )
        return updated

    @store_operation("check auto-approval")
    async def check_auto_approval(self, idea_id: str, threshold: Optional[int] = None) -> IdeaOut:
        """Approve a submitted idea whose vote count reached ``threshold``.

        Returns the idea unchanged when it is not eligible. The write is
        version-checked, so of two racing callers only one approves.
        """
        if threshold is None:
            threshold = self.auto_approval_threshold

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(StaleDocumentError),
                stop=stop_after_attempt(self.max_retries),
                before_sleep=before_sleep_log(logger, logging.DEBUG),
                reraise=True,
            ):
                with attempt:
                    idea = await fetch_idea(self.store, idea_id)
                    if idea.status != IdeaStatus.SUBMITTED or idea.vote_count < threshold:
                        return idea
                    doc = await self.store.update(
                        IDEAS,
                        idea_id,
                        {"status": IdeaStatus.APPROVED, "updated_at": utcnow()},
                        expected_version=idea.version,
                    )
        except StaleDocumentError:
            raise PropagatedError(
                "check auto-approval",
                f"idea {idea_id} kept changing after {self.max_retries} attempts",
            ) from None

        approved = IdeaOut.model_validate(doc)
        logger.info(f"Idea {idea_id} auto-approved with {approved.vote_count} votes (threshold {threshold})")
        await self.dispatcher.publish(
            IdeaEvent(
                event_type=IDEA_AUTO_APPROVED,
                team_id=idea.team_id,
                hackathon_id=idea.hackathon_id,
                text=f'🎉 "{idea.title}" was automatically approved with {approved.vote_count} votes!',
                metadata={
                    "idea_id": idea_id,
                    "idea_title": idea.title,
                    "vote_count": approved.vote_count,
                    "threshold": threshold,
                    "auto_approved": True,
                },
            )
        )
        return approved
