"""Idea → task conversion."""

import logging

from ideaboard.models.idea import IdeaStatus
from ideaboard.models.task import TaskPriority
from ideaboard.schemas.idea import ConversionResult, IdeaOut, TaskCreate
from ideaboard.services.base import fetch_idea, store_operation, utcnow
from ideaboard.services.events import IDEA_CONVERTED_TO_TASK, EventDispatcher, IdeaEvent
from ideaboard.services.store import IDEAS, DocumentStore
from ideaboard.services.tasks import TaskService
from ideaboard.services.users import UserDirectory

logger = logging.getLogger(__name__)

FROM_IDEA_LABEL = "from-idea"
DEFAULT_HIGH_PRIORITY_VOTES = 5


def task_priority(vote_count: int, high_priority_votes: int = DEFAULT_HIGH_PRIORITY_VOTES) -> TaskPriority:
    return TaskPriority.HIGH if vote_count >= high_priority_votes else TaskPriority.MEDIUM


def task_labels(tags) -> list:
    return [*(tags or []), FROM_IDEA_LABEL]


def task_description(idea: IdeaOut) -> str:
    return f"{idea.description}\n\n_Converted from idea with {idea.vote_count} votes_"


class TaskConverter:
    def __init__(
        self,
        store: DocumentStore,
        tasks: TaskService,
        users: UserDirectory,
        dispatcher: EventDispatcher,
        high_priority_votes: int = DEFAULT_HIGH_PRIORITY_VOTES,
    ):
        self.store = store
        self.tasks = tasks
        self.users = users
        self.dispatcher = dispatcher
        self.high_priority_votes = high_priority_votes

    @store_operation("convert idea to task")
    async def convert_idea_to_task(self, idea_id: str, converted_by_name: str = "Team Member") -> ConversionResult:
        """Create a task from the idea, then mark the idea in progress.

        If the task service fails its error propagates and the idea is left
        exactly as it was.
        """
        idea = await fetch_idea(self.store, idea_id)
        creator_name = await self._display_name(idea.created_by, converted_by_name)

        fields = TaskCreate(
            title=idea.title,
            description=task_description(idea),
            assigned_to=idea.created_by,
            created_by=idea.created_by,
            priority=task_priority(idea.vote_count, self.high_priority_votes),
            labels=task_labels(idea.tags),
        )
        try:
            task = await self.tasks.create_task(
                idea.team_id, idea.hackathon_id, fields, creator_name, creator_name
            )
        except Exception as exc:
            logger.error(f"Task creation for idea {idea_id} failed, idea left unchanged: {exc}")
            raise

        doc = await self.store.update(
            IDEAS, idea_id, {"status": IdeaStatus.IN_PROGRESS, "updated_at": utcnow()}
        )
        updated = IdeaOut.model_validate(doc)
        logger.info(f"Idea {idea_id} converted to task {task.id} by {converted_by_name}")

        await self.dispatcher.publish(
            IdeaEvent(
                event_type=IDEA_CONVERTED_TO_TASK,
                team_id=idea.team_id,
                hackathon_id=idea.hackathon_id,
                text=f'🔄 {converted_by_name} converted idea "{idea.title}" to a task ({idea.vote_count} votes)',
                metadata={
                    "idea_id": idea_id,
                    "idea_title": idea.title,
                    "task_id": task.id,
                    "vote_count": idea.vote_count,
                    "converted_by": converted_by_name,
                },
            )
        )
        return ConversionResult(task=task, updated_idea=updated)

    async def _display_name(self, user_id: str, fallback: str) -> str:
        try:
            name = await self.users.get_user_name(user_id)
        except Exception as exc:
            logger.warning(f"Display name lookup for {user_id} failed, using {fallback!r}: {exc}")
            return fallback
        return name or fallback
