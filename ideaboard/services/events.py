"""
Domain events emitted by the idea board and their best-effort delivery.

The engine never talks to the messaging or points collaborators directly: it
hands an ``IdeaEvent`` or ``PointsAward`` to the ``EventDispatcher``, which
retries a bounded number of times and then logs and drops the failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_exponential

from ideaboard.exceptions import DependencyError

logger = logging.getLogger(__name__)

# ── Event types ──
IDEA_CREATED = "idea_created"
IDEA_VOTED = "idea_voted"
IDEA_AUTO_APPROVED = "idea_auto_approved"
IDEA_STATUS_CHANGED = "idea_status_changed"
IDEA_CONVERTED_TO_TASK = "idea_converted_to_task"

# ── Point-award actions ──
IDEA_SUBMISSION = "idea_submission"
VOTE_GIVEN = "vote_given"


class Notifier(Protocol):
    async def notify(
        self,
        team_id: str,
        hackathon_id: str,
        text: str,
        event_type: str,
        metadata: Dict[str, Any],
    ) -> None: ...


class PointsService(Protocol):
    async def award_points(
        self,
        user_id: str,
        team_id: str,
        action: str,
        amount: Optional[int] = None,
        hackathon_id: Optional[str] = None,
        display_name: str = "Team Member",
    ) -> None: ...


@dataclass(frozen=True)
class IdeaEvent:
    event_type: str
    team_id: str
    hackathon_id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PointsAward:
    user_id: str
    team_id: str
    action: str
    hackathon_id: Optional[str] = None
    display_name: str = "Team Member"
    amount: Optional[int] = None


class EventDispatcher:
    """Deliver side effects without ever failing the primary operation."""

    def __init__(
        self,
        notifier: Notifier,
        points: PointsService,
        max_attempts: int = 1,
        retry_wait: float = 0.0,
    ):
        self.notifier = notifier
        self.points = points
        self.max_attempts = max(1, max_attempts)
        self.retry_wait = max(0.0, retry_wait)

    async def publish(self, event: IdeaEvent) -> bool:
        return await self._deliver(
            "messaging",
            event.event_type,
            lambda: self.notifier.notify(
                event.team_id,
                event.hackathon_id,
                event.text,
                event.event_type,
                dict(event.metadata),
            ),
        )

    async def award(self, award: PointsAward) -> bool:
        return await self._deliver(
            "points",
            award.action,
            lambda: self.points.award_points(
                award.user_id,
                award.team_id,
                award.action,
                award.amount,
                award.hackathon_id,
                award.display_name,
            ),
        )

    async def _deliver(
        self, collaborator: str, kind: str, send: Callable[[], Awaitable[Any]]
    ) -> bool:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=self.retry_wait, max=5),
                before_sleep=before_sleep_log(logger, logging.DEBUG),
                reraise=True,
            ):
                with attempt:
                    await send()
        except Exception as exc:
            error = DependencyError(collaborator, f"{kind}: {exc}")
            logger.warning(f"Dropping side effect after {self.max_attempts} attempt(s): {error.message}")
            return False
        return True
