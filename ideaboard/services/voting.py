"""
Voting — one vote per user per idea, plus the denormalized vote counter.

The counter is written with a version check and re-read on conflict, so two
voters racing on the same idea cannot overwrite each other's increment. A
new vote whose counter update ultimately fails is deleted again, and a
withdrawn vote is put back when its decrement fails.
"""

import logging
from typing import Dict, Iterable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from ideaboard.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    DuplicateDocumentError,
    NotFoundError,
    PropagatedError,
    StaleDocumentError,
    StoreError,
)
from ideaboard.schemas.idea import IdeaOut, VoteOut, VoteResult
from ideaboard.services.base import fetch_idea, store_operation, utcnow
from ideaboard.services.events import (
    IDEA_VOTED,
    VOTE_GIVEN,
    EventDispatcher,
    IdeaEvent,
    PointsAward,
)
from ideaboard.services.lifecycle import LifecycleManager
from ideaboard.services.store import IDEAS, VOTES, DocumentStore

logger = logging.getLogger(__name__)

DUPLICATE_VOTE_MESSAGE = "User has already voted on this idea"


class VotingCoordinator:
    def __init__(
        self,
        store: DocumentStore,
        lifecycle: LifecycleManager,
        dispatcher: EventDispatcher,
        max_retries: int = 5,
    ):
        self.store = store
        self.lifecycle = lifecycle
        self.dispatcher = dispatcher
        self.max_retries = max(1, max_retries)

    # ═══════════════════════════════════════════════════════════════
    #  Votes
    # ═══════════════════════════════════════════════════════════════

    @store_operation("vote on idea")
    async def vote_on_idea(
        self,
        idea_id: str,
        user_id: str,
        voter_name: str = "Team Member",
        threshold: Optional[int] = None,
    ) -> VoteResult:
        await fetch_idea(self.store, idea_id)

        if await self._find_vote(idea_id, user_id):
            raise ConflictError(DUPLICATE_VOTE_MESSAGE, {"idea_id": idea_id, "user_id": user_id})

        try:
            doc = await self.store.create(
                VOTES, {"idea_id": idea_id, "user_id": user_id, "created_at": utcnow()}
            )
        except DuplicateDocumentError:
            raise ConflictError(DUPLICATE_VOTE_MESSAGE, {"idea_id": idea_id, "user_id": user_id}) from None
        vote = VoteOut.model_validate(doc)

        try:
            counted = await self._adjust_vote_count(idea_id, +1)
        except (StoreError, PropagatedError):
            await self._discard_vote(vote.id)
            raise

        try:
            updated = await self.lifecycle.check_auto_approval(idea_id, threshold)
        except PropagatedError as exc:
            logger.error(f"Auto-approval check after {user_id}'s vote on idea {idea_id} failed: {exc.message}")
            updated = counted
        logger.info(f"{user_id} voted on idea {idea_id} ({counted.vote_count} votes)")

        await self.dispatcher.publish(
            IdeaEvent(
                event_type=IDEA_VOTED,
                team_id=counted.team_id,
                hackathon_id=counted.hackathon_id,
                text=f'👍 {voter_name} voted for "{counted.title}" ({counted.vote_count} votes)',
                metadata={
                    "idea_id": idea_id,
                    "idea_title": counted.title,
                    "voted_by": voter_name,
                    "new_vote_count": counted.vote_count,
                },
            )
        )
        await self.dispatcher.award(
            PointsAward(
                user_id=user_id,
                team_id=counted.team_id,
                action=VOTE_GIVEN,
                hackathon_id=counted.hackathon_id,
                display_name=voter_name,
            )
        )
        return VoteResult(vote=vote, updated_idea=updated)

    @store_operation("remove vote")
    async def remove_vote(self, idea_id: str, user_id: str) -> IdeaOut:
        await fetch_idea(self.store, idea_id)

        vote = await self._find_vote(idea_id, user_id)
        if vote is None:
            raise NotFoundError("No vote found to remove", {"idea_id": idea_id, "user_id": user_id})
        try:
            await self.store.delete(VOTES, vote.id)
        except DocumentNotFoundError:
            raise NotFoundError("No vote found to remove", {"idea_id": idea_id, "user_id": user_id}) from None

        try:
            updated = await self._adjust_vote_count(idea_id, -1)
        except (StoreError, PropagatedError):
            await self._restore_vote(vote)
            raise
        logger.info(f"{user_id} removed their vote on idea {idea_id} ({updated.vote_count} votes)")
        return updated

    # ═══════════════════════════════════════════════════════════════
    #  Vote status lookups (best-effort UI hints)
    # ═══════════════════════════════════════════════════════════════

    async def has_user_voted(self, idea_id: str, user_id: str) -> bool:
        try:
            return await self._find_vote(idea_id, user_id) is not None
        except Exception as exc:
            logger.warning(f"Could not check vote of {user_id} on idea {idea_id}: {exc}")
            return False

    async def get_user_vote_status(self, idea_ids: Iterable[str], user_id: str) -> Dict[str, bool]:
        ids = list(dict.fromkeys(idea_ids or []))
        if not ids:
            return {}
        try:
            votes = await self.store.list(VOTES, {"user_id": user_id, "idea_id": ids})
        except Exception as exc:
            logger.warning(f"Could not load vote status for {user_id}: {exc}")
            return {}
        voted = {vote["idea_id"] for vote in votes}
        return {idea_id: idea_id in voted for idea_id in ids}

    # ═══════════════════════════════════════════════════════════════
    #  Helpers
    # ═══════════════════════════════════════════════════════════════

    async def _find_vote(self, idea_id: str, user_id: str) -> Optional[VoteOut]:
        docs = await self.store.list(VOTES, {"idea_id": idea_id, "user_id": user_id}, limit=1)
        return VoteOut.model_validate(docs[0]) if docs else None

    async def _adjust_vote_count(self, idea_id: str, delta: int) -> IdeaOut:
        """Apply ``delta`` to the counter (floored at zero) with retries."""
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(StaleDocumentError),
                stop=stop_after_attempt(self.max_retries),
                before_sleep=before_sleep_log(logger, logging.INFO),
                reraise=True,
            ):
                with attempt:
                    idea = await fetch_idea(self.store, idea_id)
                    doc = await self.store.update(
                        IDEAS,
                        idea_id,
                        {"vote_count": max(0, idea.vote_count + delta), "updated_at": utcnow()},
                        expected_version=idea.version,
                    )
        except StaleDocumentError:
            raise PropagatedError(
                "update vote count",
                f"idea {idea_id} kept changing after {self.max_retries} attempts",
            ) from None
        return IdeaOut.model_validate(doc)

    async def _discard_vote(self, vote_id: str) -> None:
        try:
            await self.store.delete(VOTES, vote_id)
        except StoreError as exc:
            logger.error(f"Could not roll back vote {vote_id} after a failed count update: {exc}")

    async def _restore_vote(self, vote: VoteOut) -> None:
        try:
            await self.store.create(
                VOTES,
                {"id": vote.id, "idea_id": vote.idea_id, "user_id": vote.user_id, "created_at": vote.created_at},
            )
        except StoreError as exc:
            logger.error(f"Could not restore vote {vote.id} after a failed count update: {exc}")
