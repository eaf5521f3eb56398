"""Shared plumbing for Motor-backed document repositories.

A repository owns one collection of the configured database. Subclasses
map their aggregate to and from a document; driver calls go through the
helpers below so failures are logged with the collection and operation
before propagating unchanged.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Generic, List, Optional, TypeVar, Union

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ReturnDocument

from infrastructure.config import get_mongodb_database, get_mongodb_uri

TEntity = TypeVar("TEntity")

Document = Dict[str, Any]
# Plain update document or aggregation pipeline
UpdateSpec = Union[Document, List[Document]]

logger = logging.getLogger(__name__)


def _client_from_env() -> AsyncIOMotorClient:
    uri = get_mongodb_uri()
    if not uri:
        raise ValueError(
            "MONGODB_URI is not set (MONGODB_USER / MONGODB_PASSWORD are "
            "substituted into it when present)"
        )
    return AsyncIOMotorClient(uri)


class MongoBaseRepository(ABC, Generic[TEntity]):
    """
    Document repository bound to ``collection_name``.

    Subclasses provide ``collection_name``, ``to_document`` and
    ``from_document``. ``client`` is injected in tests and shared
    deployments; otherwise one is built from ``MONGODB_URI``.
    """

    def __init__(self, client: Optional[AsyncIOMotorClient] = None):
        self._client: AsyncIOMotorClient = client if client is not None else _client_from_env()
        self._collection: AsyncIOMotorCollection = self._client[get_mongodb_database()][
            self.collection_name
        ]
        logger.info(
            "Mongo repository ready",
            extra={"repository": type(self).__name__, "collection": self.collection_name},
        )

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Collection holding this repository's documents."""

    @abstractmethod
    def to_document(self, entity: TEntity) -> Document: ...

    @abstractmethod
    def from_document(self, doc: Document) -> TEntity:
        """Rebuild the entity; raises if the stored document is malformed."""

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    @staticmethod
    def now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    @asynccontextmanager
    async def _driver_call(self, operation: str, filter_dict: Optional[Document] = None) -> AsyncIterator[None]:
        try:
            yield
        except Exception:
            logger.error(
                "Mongo operation failed",
                extra={
                    "collection": self.collection_name,
                    "operation": operation,
                    "filter": filter_dict,
                },
                exc_info=True,
            )
            raise

    async def _find_one(self, filter_dict: Document) -> Optional[Document]:
        async with self._driver_call("find_one", filter_dict):
            return await self._collection.find_one(filter_dict)

    async def _find_many(self, filter_dict: Document) -> List[Document]:
        async with self._driver_call("find", filter_dict):
            return await self._collection.find(filter_dict).to_list(length=None)

    async def _insert_one(self, document: Document) -> None:
        async with self._driver_call("insert_one", {"_id": document.get("_id")}):
            await self._collection.insert_one(document)

    async def _find_one_and_update(self, filter_dict: Document, update: UpdateSpec) -> Optional[Document]:
        """Atomic update; returns the document as it is after the update."""
        async with self._driver_call("find_one_and_update", filter_dict):
            return await self._collection.find_one_and_update(
                filter_dict, update, return_document=ReturnDocument.AFTER
            )

    async def _find_one_and_delete(self, filter_dict: Document) -> Optional[Document]:
        async with self._driver_call("find_one_and_delete", filter_dict):
            return await self._collection.find_one_and_delete(filter_dict)

    async def close(self) -> None:
        self._client.close()
        logger.info("Mongo client closed", extra={"repository": type(self).__name__})
