"""Idea board Pydantic schemas — typed records and request bodies."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ideaboard.models.idea import IdeaStatus
from ideaboard.models.task import TaskPriority, TaskStatus


# ── Records validated at the store boundary ──

class IdeaOut(BaseModel):
    id: str
    team_id: str
    hackathon_id: str
    title: str
    description: str
    tags: List[str] = Field(default_factory=list)
    status: IdeaStatus
    vote_count: int = 0
    version: int = 1
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value):
        return value or []


class VoteOut(BaseModel):
    id: str
    idea_id: str
    user_id: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskOut(BaseModel):
    id: str
    team_id: str
    hackathon_id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    labels: List[str] = Field(default_factory=list)
    assigned_to: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("labels", mode="before")
    @classmethod
    def _none_labels(cls, value):
        return value or []


# ── Inputs ──

class IdeaCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    created_by: str


class TaskCreate(BaseModel):
    title: str
    description: str
    assigned_to: str
    created_by: str
    priority: TaskPriority
    labels: List[str] = Field(default_factory=list)


# ── Operation results ──

class VoteResult(BaseModel):
    vote: VoteOut
    updated_idea: IdeaOut


class ConversionResult(BaseModel):
    task: TaskOut
    updated_idea: IdeaOut


# ── Request bodies ──

class IdeaSubmit(IdeaCreate):
    submitter_name: str = "Team Member"


class VoteRequest(BaseModel):
    user_id: str
    voter_name: str = "Team Member"


class StatusUpdate(BaseModel):
    status: str
    actor_name: str = "system"


class AutoApprovalCheck(BaseModel):
    threshold: Optional[int] = Field(default=None, ge=1)


class ConvertRequest(BaseModel):
    converted_by_name: str = "Team Member"


class VoteStatusRequest(BaseModel):
    idea_ids: List[str] = Field(default_factory=list)
    user_id: str


class VoteStatusOut(BaseModel):
    votes: Dict[str, bool]


class ErrorOut(BaseModel):
    detail: str
    code: str
    details: Dict[str, Any] = Field(default_factory=dict)
