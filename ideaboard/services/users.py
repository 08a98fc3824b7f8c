"""Display-name lookup for user ids."""

from typing import Optional, Protocol

from ideaboard.exceptions import DocumentNotFoundError
from ideaboard.services.store import USERS, DocumentStore


class UserDirectory(Protocol):
    async def get_user_name(self, user_id: str) -> Optional[str]: ...


class DatabaseUserDirectory:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_user_name(self, user_id: str) -> Optional[str]:
        """Return the user's full name, or None for an unknown id."""
        try:
            user = await self.store.get(USERS, user_id)
        except DocumentNotFoundError:
            return None
        return user.get("full_name")
