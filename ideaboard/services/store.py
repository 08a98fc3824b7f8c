"""
Document store — the only path by which the idea board touches persistence.

The engine depends on the ``DocumentStore`` protocol; ``SqlAlchemyDocumentStore``
implements it on top of an async SQLAlchemy session. Every write is committed
on its own, like a remote document database would.
"""

import enum
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaboard.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    StaleDocumentError,
    StoreError,
)
from ideaboard.models import Idea, IdeaVote, PointAward, Task, TeamMessage, User

logger = logging.getLogger(__name__)

# ── Collection names ──
IDEAS = "ideas"
VOTES = "idea_votes"
TASKS = "tasks"
TEAM_MESSAGES = "team_messages"
POINT_AWARDS = "point_awards"
USERS = "users"

COLLECTION_MODELS = {
    IDEAS: Idea,
    VOTES: IdeaVote,
    TASKS: Task,
    TEAM_MESSAGES: TeamMessage,
    POINT_AWARDS: PointAward,
    USERS: User,
}

JSON_SUFFIX = "_json"

Document = Dict[str, Any]
Order = Sequence[Tuple[str, str]]


class DocumentStore(Protocol):
    """CRUD + query over named collections of documents."""

    async def create(self, collection: str, data: Document) -> Document: ...

    async def get(self, collection: str, document_id: str) -> Document: ...

    async def update(
        self,
        collection: str,
        document_id: str,
        patch: Document,
        expected_version: Optional[int] = None,
    ) -> Document: ...

    async def list(
        self,
        collection: str,
        filters: Optional[Document] = None,
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Document]: ...

    async def delete(self, collection: str, document_id: str) -> None: ...


class SqlAlchemyDocumentStore:
    """``DocumentStore`` backed by the ORM models in ``ideaboard.models``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ═══════════════════════════════════════════════════════════════
    #  Helpers
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTION_MODELS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}", collection) from None

    @staticmethod
    def _to_document(obj) -> Document:
        """Flatten an ORM row: ``*_json`` columns decode, enums become values."""
        doc: Document = {}
        for column in obj.__table__.columns:
            value = getattr(obj, column.key)
            if column.key.endswith(JSON_SUFFIX):
                doc[column.key[: -len(JSON_SUFFIX)]] = json.loads(value) if value else None
            elif isinstance(value, enum.Enum):
                doc[column.key] = value.value
            else:
                doc[column.key] = value
        return doc

    @staticmethod
    def _to_row(model, collection: str, data: Document) -> Document:
        columns = set(model.__table__.columns.keys())
        row: Document = {}
        for key, value in data.items():
            json_key = key + JSON_SUFFIX
            if json_key in columns:
                row[json_key] = json.dumps(value) if value is not None else None
            elif key in columns:
                row[key] = value
            else:
                raise StoreError(f"Unknown field '{key}' for {collection}", collection)
        return row

    @staticmethod
    def _conditions(model, collection: str, filters: Optional[Document]) -> list:
        conditions = []
        for key, value in (filters or {}).items():
            column = getattr(model, key, None)
            if column is None:
                raise StoreError(f"Cannot filter {collection} on '{key}'", collection)
            if value is None:
                conditions.append(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            else:
                conditions.append(column == value)
        return conditions

    @staticmethod
    def _ordering(model, collection: str, order: Optional[Order]) -> Iterable:
        for key, direction in order or ():
            column = getattr(model, key, None)
            if column is None:
                raise StoreError(f"Cannot order {collection} by '{key}'", collection)
            yield column.desc() if direction == "desc" else column.asc()

    @asynccontextmanager
    async def _guard(self, operation: str, collection: str):
        """Roll back and translate driver errors into ``StoreError``s."""
        try:
            yield
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateDocumentError(
                f"{operation} on {collection} violates a uniqueness rule", collection
            ) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Store {operation} on {collection} failed: {exc}")
            raise StoreError(f"{operation} on {collection} failed: {exc}", collection) from exc

    # ═══════════════════════════════════════════════════════════════
    #  DocumentStore API
    # ═══════════════════════════════════════════════════════════════

    async def create(self, collection: str, data: Document) -> Document:
        model = self._model(collection)
        async with self._guard("create", collection):
            obj = model(**self._to_row(model, collection, data))
            self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(obj)
            return self._to_document(obj)

    async def get(self, collection: str, document_id: str) -> Document:
        model = self._model(collection)
        async with self._guard("get", collection):
            obj = await self.session.get(model, document_id, populate_existing=True)
        if obj is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._to_document(obj)

    async def update(
        self,
        collection: str,
        document_id: str,
        patch: Document,
        expected_version: Optional[int] = None,
    ) -> Document:
        model = self._model(collection)
        values = self._to_row(model, collection, patch)
        values.pop("id", None)
        versioned = hasattr(model, "version")
        if versioned:
            values.pop("version", None)
            values["version"] = model.version + 1

        stmt = update(model).where(model.id == document_id)
        if expected_version is not None:
            if not versioned:
                raise StoreError(f"{collection} documents are not versioned", collection)
            stmt = stmt.where(model.version == expected_version)

        async with self._guard("update", collection):
            result = await self.session.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                exists = await self.session.get(model, document_id)
                if exists is None:
                    raise DocumentNotFoundError(collection, document_id)
                raise StaleDocumentError(collection, document_id, expected_version)
            await self.session.commit()

        return await self.get(collection, document_id)

    async def list(
        self,
        collection: str,
        filters: Optional[Document] = None,
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        model = self._model(collection)
        stmt = select(model).where(*self._conditions(model, collection, filters))
        stmt = stmt.order_by(*self._ordering(model, collection, order))
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._guard("list", collection):
            result = await self.session.execute(
                stmt.execution_options(populate_existing=True)
            )
            return [self._to_document(obj) for obj in result.scalars().all()]

    async def delete(self, collection: str, document_id: str) -> None:
        model = self._model(collection)
        async with self._guard("delete", collection):
            obj = await self.session.get(model, document_id)
            if obj is None:
                raise DocumentNotFoundError(collection, document_id)
            await self.session.delete(obj)
            await self.session.commit()
