"""Gamification points ledger."""

import logging
from typing import Dict, Optional

from ideaboard.config import settings
from ideaboard.services.events import IDEA_SUBMISSION, VOTE_GIVEN
from ideaboard.services.store import POINT_AWARDS, DocumentStore

logger = logging.getLogger(__name__)


def default_point_values() -> Dict[str, int]:
    return {
        IDEA_SUBMISSION: settings.POINTS_IDEA_SUBMISSION,
        VOTE_GIVEN: settings.POINTS_VOTE_GIVEN,
    }


class PointsLedger:
    """``PointsService`` that appends one row per award."""

    def __init__(self, store: DocumentStore, point_values: Optional[Dict[str, int]] = None):
        self.store = store
        self.point_values = point_values if point_values is not None else default_point_values()

    async def award_points(
        self,
        user_id: str,
        team_id: str,
        action: str,
        amount: Optional[int] = None,
        hackathon_id: Optional[str] = None,
        display_name: str = "Team Member",
    ) -> None:
        points = amount if amount is not None else self.point_values.get(action, 0)
        await self.store.create(
            POINT_AWARDS,
            {
                "user_id": user_id,
                "team_id": team_id,
                "hackathon_id": hackathon_id,
                "action": action,
                "points": points,
                "display_name": display_name,
            },
        )
        logger.info(f"Awarded {points} point(s) to {user_id} for {action}")
