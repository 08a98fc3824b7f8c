"""
IdeaBoard — the engine's public API.

Every collaborator is injected, so one process can hold several isolated
boards (one per request in the web app, one per test).
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ideaboard.config import Settings, settings as default_settings
from ideaboard.exceptions import ValidationError
from ideaboard.schemas.idea import ConversionResult, IdeaCreate, IdeaOut, VoteResult
from ideaboard.services.base import fetch_idea, store_operation
from ideaboard.services.conversion import TaskConverter
from ideaboard.services.events import EventDispatcher, Notifier, PointsService
from ideaboard.services.lifecycle import LifecycleManager, parse_status
from ideaboard.services.notifications import SystemMessageNotifier
from ideaboard.services.points import PointsLedger
from ideaboard.services.store import IDEAS, DocumentStore, SqlAlchemyDocumentStore
from ideaboard.services.submission import IdeaSubmission
from ideaboard.services.tasks import DatabaseTaskService, TaskService
from ideaboard.services.users import DatabaseUserDirectory, UserDirectory
from ideaboard.services.voting import VotingCoordinator

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "date": (lambda idea: idea.created_at, True),
    "votes": (lambda idea: idea.vote_count, True),
    "title": (lambda idea: idea.title.casefold(), False),
    "status": (lambda idea: idea.status.value, False),
}


class IdeaBoard:
    def __init__(
        self,
        store: DocumentStore,
        notifier: Notifier,
        points: PointsService,
        tasks: TaskService,
        users: UserDirectory,
        settings: Optional[Settings] = None,
    ):
        settings = settings or default_settings
        self.store = store
        self.dispatcher = EventDispatcher(
            notifier,
            points,
            max_attempts=settings.SIDE_EFFECT_MAX_ATTEMPTS,
            retry_wait=settings.SIDE_EFFECT_RETRY_WAIT,
        )

        self.submission = IdeaSubmission(store, self.dispatcher)
        self.lifecycle = LifecycleManager(
            store,
            self.dispatcher,
            auto_approval_threshold=settings.AUTO_APPROVAL_THRESHOLD,
            max_retries=settings.VOTE_UPDATE_MAX_RETRIES,
        )
        self.voting = VotingCoordinator(
            store,
            self.lifecycle,
            self.dispatcher,
            max_retries=settings.VOTE_UPDATE_MAX_RETRIES,
        )
        self.converter = TaskConverter(
            store,
            tasks,
            users,
            self.dispatcher,
            high_priority_votes=settings.HIGH_PRIORITY_VOTE_THRESHOLD,
        )

    # ── Submission ──

    async def create_idea(
        self,
        team_id: str,
        hackathon_id: str,
        payload: Union[IdeaCreate, dict],
        submitter_name: str = "Team Member",
    ) -> IdeaOut:
        return await self.submission.create_idea(team_id, hackathon_id, payload, submitter_name)

    # ── Queries ──

    @store_operation("fetch idea")
    async def get_idea(self, idea_id: str) -> IdeaOut:
        return await fetch_idea(self.store, idea_id)

    @store_operation("fetch team ideas")
    async def get_team_ideas(
        self,
        team_id: str,
        hackathon_id: Optional[str] = None,
        sort_by: str = "date",
        status: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> List[IdeaOut]:
        """List a team's ideas, filtered and sorted the way the board shows them.

        ``status`` of None or "all" keeps every status; ``tags`` keeps ideas
        carrying all of the given tags.
        """
        if sort_by not in SORT_KEYS:
            raise ValidationError(
                f"Invalid sort: {sort_by!r}. Must be one of: {', '.join(SORT_KEYS)}",
                {"sort_by": sort_by},
            )
        if limit is not None and limit < 1:
            raise ValidationError("Limit must be a positive integer", {"limit": limit})

        filters = {"team_id": team_id}
        if hackathon_id:
            filters["hackathon_id"] = hackathon_id
        if status and status != "all":
            filters["status"] = parse_status(status)

        docs = await self.store.list(IDEAS, filters, order=[("created_at", "desc")])
        ideas = [IdeaOut.model_validate(doc) for doc in docs]

        wanted = {tag.strip() for tag in tags or [] if tag and tag.strip()}
        if wanted:
            ideas = [idea for idea in ideas if wanted.issubset(idea.tags)]

        key, descending = SORT_KEYS[sort_by]
        if sort_by != "date":
            ideas.sort(key=key, reverse=descending)

        return ideas[:limit] if limit is not None else ideas

    # ── Voting ──

    async def vote_on_idea(self, idea_id: str, user_id: str, voter_name: str = "Team Member") -> VoteResult:
        return await self.voting.vote_on_idea(idea_id, user_id, voter_name)

    async def remove_vote(self, idea_id: str, user_id: str) -> IdeaOut:
        return await self.voting.remove_vote(idea_id, user_id)

    async def has_user_voted(self, idea_id: str, user_id: str) -> bool:
        return await self.voting.has_user_voted(idea_id, user_id)

    async def get_user_vote_status(self, idea_ids: Iterable[str], user_id: str) -> Dict[str, bool]:
        return await self.voting.get_user_vote_status(idea_ids, user_id)

    # ── Lifecycle ──

    async def update_idea_status(self, idea_id: str, status, actor_name: str = "system") -> IdeaOut:
        return await self.lifecycle.update_idea_status(idea_id, status, actor_name)

    async def check_auto_approval(self, idea_id: str, threshold: Optional[int] = None) -> IdeaOut:
        return await self.lifecycle.check_auto_approval(idea_id, threshold)

    # ── Conversion ──

    async def convert_idea_to_task(self, idea_id: str, converted_by_name: str = "Team Member") -> ConversionResult:
        return await self.converter.convert_idea_to_task(idea_id, converted_by_name)


def build_idea_board(session: AsyncSession, settings: Optional[Settings] = None) -> IdeaBoard:
    """Wire an ``IdeaBoard`` to the database-backed collaborators."""
    store = SqlAlchemyDocumentStore(session)
    return IdeaBoard(
        store=store,
        notifier=SystemMessageNotifier(store),
        points=PointsLedger(store),
        tasks=DatabaseTaskService(store),
        users=DatabaseUserDirectory(store),
        settings=settings,
    )
