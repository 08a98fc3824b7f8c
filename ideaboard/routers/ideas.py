"""Idea board router — submit, vote, approve, and convert team ideas."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideaboard.database import get_db
from ideaboard.schemas.idea import (
    AutoApprovalCheck,
    ConversionResult,
    ConvertRequest,
    IdeaOut,
    IdeaSubmit,
    StatusUpdate,
    VoteRequest,
    VoteResult,
    VoteStatusOut,
    VoteStatusRequest,
)
from ideaboard.services.idea_board import IdeaBoard, build_idea_board

router = APIRouter(prefix="/ideas", tags=["ideas"])


async def get_idea_board(db: AsyncSession = Depends(get_db)) -> IdeaBoard:
    """Build a request-scoped board on the request's session."""
    return build_idea_board(db)


# ═══════════════════════════════════════════════════════════════
#  POST /ideas/teams/{team_id}/hackathons/{hackathon_id} → submit
# ═══════════════════════════════════════════════════════════════

@router.post("/teams/{team_id}/hackathons/{hackathon_id}", response_model=IdeaOut, status_code=201)
async def submit_idea(
    team_id: str,
    hackathon_id: str,
    body: IdeaSubmit,
    board: IdeaBoard = Depends(get_idea_board),
):
    payload = body.model_dump(exclude={"submitter_name"})
    return await board.create_idea(team_id, hackathon_id, payload, body.submitter_name)


# ═══════════════════════════════════════════════════════════════
#  GET /ideas/teams/{team_id} → list a team's ideas
# ═══════════════════════════════════════════════════════════════

@router.get("/teams/{team_id}", response_model=List[IdeaOut])
async def list_team_ideas(
    team_id: str,
    hackathon_id: Optional[str] = None,
    sort_by: str = "date",
    status: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    limit: Optional[int] = None,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.get_team_ideas(
        team_id,
        hackathon_id,
        sort_by=sort_by,
        status=status,
        tags=tags,
        limit=limit,
    )


# ═══════════════════════════════════════════════════════════════
#  POST /ideas/vote-status → which of these ideas has the user voted on
# ═══════════════════════════════════════════════════════════════

@router.post("/vote-status", response_model=VoteStatusOut)
async def vote_status(
    body: VoteStatusRequest,
    board: IdeaBoard = Depends(get_idea_board),
):
    return {"votes": await board.get_user_vote_status(body.idea_ids, body.user_id)}


# ═══════════════════════════════════════════════════════════════
#  GET /ideas/{idea_id} → a single idea
# ═══════════════════════════════════════════════════════════════

@router.get("/{idea_id}", response_model=IdeaOut)
async def get_idea(
    idea_id: str,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.get_idea(idea_id)


# ═══════════════════════════════════════════════════════════════
#  POST / DELETE /ideas/{idea_id}/votes → cast or withdraw a vote
# ═══════════════════════════════════════════════════════════════

@router.post("/{idea_id}/votes", response_model=VoteResult, status_code=201)
async def vote_idea(
    idea_id: str,
    body: VoteRequest,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.vote_on_idea(idea_id, body.user_id, body.voter_name)


@router.delete("/{idea_id}/votes/{user_id}", response_model=IdeaOut)
async def unvote_idea(
    idea_id: str,
    user_id: str,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.remove_vote(idea_id, user_id)


# ═══════════════════════════════════════════════════════════════
#  PATCH /ideas/{idea_id}/status → explicit status change
# ═══════════════════════════════════════════════════════════════

@router.patch("/{idea_id}/status", response_model=IdeaOut)
async def change_status(
    idea_id: str,
    body: StatusUpdate,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.update_idea_status(idea_id, body.status, body.actor_name)


@router.post("/{idea_id}/auto-approval", response_model=IdeaOut)
async def auto_approval(
    idea_id: str,
    body: AutoApprovalCheck,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.check_auto_approval(idea_id, body.threshold)


# ═══════════════════════════════════════════════════════════════
#  POST /ideas/{idea_id}/convert → turn the idea into a task
# ═══════════════════════════════════════════════════════════════

@router.post("/{idea_id}/convert", response_model=ConversionResult, status_code=201)
async def convert_idea(
    idea_id: str,
    body: ConvertRequest,
    board: IdeaBoard = Depends(get_idea_board),
):
    return await board.convert_idea_to_task(idea_id, body.converted_by_name)
