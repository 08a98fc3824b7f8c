"""Helpers shared by the idea board components."""

import functools
import logging
from datetime import datetime, timezone

from ideaboard.exceptions import DocumentNotFoundError, NotFoundError, PropagatedError, StoreError
from ideaboard.schemas.idea import IdeaOut
from ideaboard.services.store import IDEAS, DocumentStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def fetch_idea(store: DocumentStore, idea_id: str) -> IdeaOut:
    """Load an idea as a typed record, or raise ``NotFoundError``."""
    try:
        doc = await store.get(IDEAS, idea_id)
    except DocumentNotFoundError:
        raise NotFoundError("Idea not found", {"idea_id": idea_id}) from None
    return IdeaOut.model_validate(doc)


def store_operation(operation: str):
    """Re-raise store failures as ``PropagatedError`` naming ``operation``."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except StoreError as exc:
                logger.error(f"Failed to {operation}: {exc.message}")
                raise PropagatedError(operation, exc.message) from exc

        return wrapper

    return decorator
