"""Team chat notifier — posts idea board events as system messages."""

import logging
from typing import Any, Dict

from ideaboard.services.store import TEAM_MESSAGES, DocumentStore

logger = logging.getLogger(__name__)


class SystemMessageNotifier:
    """``Notifier`` that stores each event as a bot message in the team feed."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def notify(
        self,
        team_id: str,
        hackathon_id: str,
        text: str,
        event_type: str,
        metadata: Dict[str, Any],
    ) -> None:
        await self.store.create(
            TEAM_MESSAGES,
            {
                "team_id": team_id,
                "hackathon_id": hackathon_id,
                "content": text,
                "msg_type": event_type,
                "metadata": metadata,
                "is_bot": True,
            },
        )
        logger.info(f"Posted {event_type} message to team {team_id}")
