"""Transactional document store used by the ordering managers.

The managers talk to :class:`DocumentStore` / :class:`CollectionGateway`
rather than to Motor directly, so the whole read-modify-write set of one
ordering operation runs through :meth:`DocumentStore.run_in_transaction`.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from content_api.mongodb.client import MongoDBClient, get_mongodb_client
from content_api.ordering.errors import StoreFailure, TransactionConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Document = dict[str, Any]
SortSpec = list[tuple[str, int]]

ORDER_ASC: SortSpec = [("order", ASCENDING)]
ORDER_DESC: SortSpec = [("order", DESCENDING)]
RECENCY_DESC: SortSpec = [("updated_at", DESCENDING), ("_id", DESCENDING)]


class CollectionGateway(Protocol):
    """The subset of collection operations the ordering code relies on."""

    def find(
        self,
        query: Document,
        *,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
        session: Any = None,
    ) -> AsyncIterator[Document]: ...

    async def find_one(
        self,
        query: Document,
        *,
        sort: SortSpec | None = None,
        session: Any = None,
    ) -> Document | None: ...

    async def count(self, query: Document, *, session: Any = None) -> int: ...

    async def distinct(self, field: str, query: Document) -> list[Any]: ...

    async def insert_one(self, document: Document, *, session: Any = None) -> ObjectId: ...

    async def update_one(
        self,
        query: Document,
        update: Document,
        *,
        upsert: bool = False,
        session: Any = None,
    ) -> int: ...

    async def update_many(
        self,
        query: Document,
        update: Document,
        *,
        session: Any = None,
    ) -> int: ...

    async def delete_one(self, query: Document, *, session: Any = None) -> int: ...

    async def delete_many(self, query: Document, *, session: Any = None) -> int: ...


class DocumentStore(Protocol):
    """A document database offering atomic multi-document transactions."""

    def collection(self, name: str) -> CollectionGateway: ...

    async def run_in_transaction(self, fn: Callable[[Any], Awaitable[T]]) -> T: ...


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Surface driver failures as :class:`StoreFailure` subclasses."""
    try:
        yield
    except PyMongoError as e:
        logger.error("Store operation %s failed: %s", operation, e, exc_info=True)
        if e.has_error_label("TransientTransactionError"):
            msg = f"Transaction conflict during {operation}; safe to retry"
            raise TransactionConflictError(msg) from e
        msg = f"Store failure during {operation}"
        raise StoreFailure(msg) from e


class MotorCollectionGateway:
    """:class:`CollectionGateway` over a Motor collection.

    Calls made inside a transaction (``session`` given) let driver errors
    through untouched so ``with_transaction`` can inspect their labels and
    retry; standalone calls translate them.
    """

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    @contextmanager
    def _guard(self, operation: str, session: Any) -> Iterator[None]:
        if session is not None:
            yield
            return
        with translate_store_errors(f"{self._collection.name}.{operation}"):
            yield

    async def find(
        self,
        query: Document,
        *,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
        session: Any = None,
    ) -> AsyncIterator[Document]:
        with self._guard("find", session):
            cursor = self._collection.find(query, session=session)
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            async for document in cursor:
                yield document

    async def find_one(
        self,
        query: Document,
        *,
        sort: SortSpec | None = None,
        session: Any = None,
    ) -> Document | None:
        with self._guard("find_one", session):
            return await self._collection.find_one(query, sort=sort, session=session)

    async def count(self, query: Document, *, session: Any = None) -> int:
        with self._guard("count", session):
            return await self._collection.count_documents(query, session=session)

    async def distinct(self, field: str, query: Document) -> list[Any]:
        with self._guard("distinct", None):
            return await self._collection.distinct(field, query)

    async def insert_one(self, document: Document, *, session: Any = None) -> ObjectId:
        with self._guard("insert_one", session):
            result = await self._collection.insert_one(document, session=session)
            return result.inserted_id

    async def update_one(
        self,
        query: Document,
        update: Document,
        *,
        upsert: bool = False,
        session: Any = None,
    ) -> int:
        with self._guard("update_one", session):
            result = await self._collection.update_one(
                query, update, upsert=upsert, session=session
            )
            return result.matched_count

    async def update_many(
        self,
        query: Document,
        update: Document,
        *,
        session: Any = None,
    ) -> int:
        with self._guard("update_many", session):
            result = await self._collection.update_many(query, update, session=session)
            return result.modified_count

    async def delete_one(self, query: Document, *, session: Any = None) -> int:
        with self._guard("delete_one", session):
            result = await self._collection.delete_one(query, session=session)
            return result.deleted_count

    async def delete_many(self, query: Document, *, session: Any = None) -> int:
        with self._guard("delete_many", session):
            result = await self._collection.delete_many(query, session=session)
            return result.deleted_count


class MotorDocumentStore:
    """:class:`DocumentStore` backed by the shared Motor client."""

    def __init__(self, client: MongoDBClient | None = None) -> None:
        self._client = client or get_mongodb_client()

    def collection(self, name: str) -> MotorCollectionGateway:
        return MotorCollectionGateway(self._client.database[name])

    async def run_in_transaction(self, fn: Callable[[AsyncIOMotorClientSession], Awaitable[T]]) -> T:
        """Run ``fn(session)`` atomically.

        The driver retries ``fn`` on transient transaction errors; once it
        gives up, or on any other driver error, the transaction is aborted
        and a :class:`StoreFailure` is raised. Domain errors raised by ``fn``
        abort the transaction and propagate unchanged.
        """
        with translate_store_errors("transaction"):
            async with await self._client.start_session() as session:
                return await session.with_transaction(
                    fn,
                    read_concern=ReadConcern("snapshot"),
                    write_concern=WriteConcern("majority"),
                    max_commit_time_ms=self._client.config.max_commit_time_ms,
                )


_store: MotorDocumentStore | None = None


def get_document_store() -> DocumentStore:
    """Get the process-wide document store (FastAPI dependency)."""
    global _store
    if _store is None:
        _store = MotorDocumentStore()
    return _store
