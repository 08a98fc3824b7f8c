"""Task service — creates the work items ideas are converted into."""

import logging
from typing import Protocol

from ideaboard.schemas.idea import TaskCreate, TaskOut
from ideaboard.services.store import TASKS, DocumentStore

logger = logging.getLogger(__name__)


class TaskService(Protocol):
    async def create_task(
        self,
        team_id: str,
        hackathon_id: str,
        fields: TaskCreate,
        creator_name: str,
        assignee_name: str,
    ) -> TaskOut: ...


class DatabaseTaskService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_task(
        self,
        team_id: str,
        hackathon_id: str,
        fields: TaskCreate,
        creator_name: str,
        assignee_name: str,
    ) -> TaskOut:
        doc = await self.store.create(
            TASKS,
            {"team_id": team_id, "hackathon_id": hackathon_id, **fields.model_dump()},
        )
        logger.info(f"{creator_name} created task {doc['id']} for {assignee_name}")
        return TaskOut.model_validate(doc)
