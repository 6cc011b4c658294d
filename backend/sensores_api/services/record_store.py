"""
Record Store
============

The ONLY place that talks to MongoDB.

WHAT IT DOES:
------------
1. Owns the MongoDB client (motor, so every call is async)
2. Opens it on connect(), closes it on disconnect()
3. Runs exactly one driver call per operation
4. Turns any driver failure into a StoreError

Nothing here knows about HTTP, status codes or broadcasts. Not found is
just None.

THE DATA FLOW:
-------------
    RecordGateway
          |
          | insert_one / find / find_one_and_update / ...
          v
    [This Store]
          |
          v
    MongoDB (collection "sensoresactuadores")
"""

import logging
from typing import Any, Optional

from bson import ObjectId
from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from sensores_api.utils import validate_record_id

logger = logging.getLogger(__name__)

# bson raises OverflowError (not BSONError) for ints wider than 8 bytes
DRIVER_ERRORS = (PyMongoError, BSONError, OverflowError)


class StoreError(Exception):
    """Any failure coming from the database driver."""


class RecordStore:
    """
    Explicitly constructed MongoDB store for sensor/actuator documents.

    HOW TO USE:
    ----------
    store = RecordStore("mongodb://127.0.0.1:27017/incubadoraDB")
    await store.connect()

    document = await store.insert({"tipo": "sensor", "nombre": "Temp1"})

    await store.disconnect()

    Tests hand in their own client (e.g. mongomock-motor) and the store
    uses it instead of creating one.
    """

    DEFAULT_DATABASE = "incubadoraDB"
    COLLECTION = "sensoresactuadores"

    def __init__(
        self,
        uri: str,
        database: Optional[str] = None,
        client: Any = None,
    ):
        """
        Set up the store (nothing is opened yet).

        Args:
            uri: MongoDB connection string
            database: Database name. Default is the one in the URI,
                      or incubadoraDB if the URI has none.
            client: Ready-made motor-compatible client to use instead
        """
        self.uri = uri
        self.database_name = database
        self._client = client
        self._owns_client = client is None
        self._collection = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self):
        """Open the client and bind the collection."""
        if self._client is None:
            self._client = AsyncIOMotorClient(self.uri, tz_aware=True)

        if self.database_name:
            db = self._client[self.database_name]
        else:
            db = self._client.get_default_database(self.DEFAULT_DATABASE)
        self._collection = db[self.COLLECTION]

        if self._owns_client:
            try:
                await self._client.admin.command("ping")
                logger.info(f"MongoDB connected ({db.name})")
            except PyMongoError as e:
                # Same as a lost connection later on: requests answer 500 until it comes back
                logger.error(f"Error connecting to MongoDB: {e}")

    async def disconnect(self):
        """Close the client if we opened it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            logger.info("MongoDB connection closed")
            self._client = None
        self._collection = None

    @property
    def collection(self):
        if self._collection is None:
            raise StoreError("Store is not connected")
        return self._collection

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def find_all(self, query: Optional[dict] = None) -> list[dict]:
        """All documents matching ``query``, in the store's natural order."""
        try:
            cursor = self.collection.find(query or {})
            return await cursor.to_list(length=None)
        except DRIVER_ERRORS as e:
            raise StoreError(f"find failed: {e}") from e

    async def find_by_id(self, record_id: str) -> Optional[dict]:
        if not validate_record_id(record_id):
            return None
        try:
            return await self.collection.find_one({"_id": ObjectId(record_id)})
        except DRIVER_ERRORS as e:
            raise StoreError(f"find_one failed: {e}") from e

    async def insert(self, document: dict) -> dict:
        """
        Insert a new document.

        Returns:
            The stored document, with the "_id" the store assigned
        """
        document = dict(document)
        try:
            result = await self.collection.insert_one(document)
        except DRIVER_ERRORS as e:
            raise StoreError(f"insert failed: {e}") from e
        document["_id"] = result.inserted_id
        return document

    async def update_by_id(self, record_id: str, changes: dict) -> Optional[dict]:
        """
        $set ``changes`` on one document. Never upserts.

        Returns:
            The document AFTER the update, or None if there is no such record
        """
        if not validate_record_id(record_id):
            return None
        if not changes:
            # $set with no fields is rejected by MongoDB; nothing to change anyway
            return await self.find_by_id(record_id)
        try:
            return await self.collection.find_one_and_update(
                {"_id": ObjectId(record_id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DRIVER_ERRORS as e:
            raise StoreError(f"find_one_and_update failed: {e}") from e

    async def delete_by_id(self, record_id: str) -> Optional[dict]:
        """
        Remove one document.

        Returns:
            The document as it was BEFORE deletion, or None if it did not exist
        """
        if not validate_record_id(record_id):
            return None
        try:
            return await self.collection.find_one_and_delete({"_id": ObjectId(record_id)})
        except DRIVER_ERRORS as e:
            raise StoreError(f"find_one_and_delete failed: {e}") from e
