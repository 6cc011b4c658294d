"""
Record Gateway
==============

This is where every request about records ends up, HTTP or WebSocket.

WHAT IT DOES:
------------
1. list_partitioned - everything, split into sensores / actuadores
2. create           - store a new record        -> broadcast record-saved
3. update           - change fields of a record -> broadcast record-updated
4. delete           - remove a record           -> broadcast record-deleted
5. find             - one record by ID
6. search           - by nombre and/or tipo

Each call is one store call. Not found comes back as None; the routers
decide what status code that means. Bad search parameters raise
InvalidSearchError. Store failures (StoreError) are passed up untouched.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from sensores_api.models import (
    KIND_ACTUATOR,
    KIND_SENSOR,
    PartitionedRecords,
    Record,
    RecordCreate,
    RecordUpdate,
)
from sensores_api.services.change_notifier import (
    ChangeNotifier,
    EVENT_DELETED,
    EVENT_SAVED,
    EVENT_UPDATED,
)
from sensores_api.services.record_store import RecordStore, StoreError
from sensores_api.utils import exact_pattern, normalize_search_kind, substring_pattern

logger = logging.getLogger(__name__)


class InvalidSearchError(ValueError):
    """The search parameters can't be turned into a query (client error)."""


def to_record(document: dict) -> Record:
    """Build a Record from a stored document; unusable documents are store failures."""
    try:
        return Record.from_document(document)
    except ValidationError as e:
        raise StoreError(f"malformed document {document.get('_id')}: {e.error_count()} errors") from e


class RecordGateway:
    """
    CRUD + search over the sensoresactuadores collection.

    HOW TO USE:
    ----------
    gateway = RecordGateway(store, notifier)

    record = await gateway.create(RecordCreate(tipo="sensor", nombre="Temp1"))
    same = await gateway.find(record.id)
    """

    def __init__(self, store: RecordStore, notifier: Optional[ChangeNotifier] = None):
        self.store = store
        self.notifier = notifier

    def _publish(self, event: str, record: Record):
        if self.notifier is not None:
            self.notifier.publish(event, record)

    # =========================================================================
    # READS
    # =========================================================================

    async def list_partitioned(self) -> PartitionedRecords:
        """
        Every record, split by kind (case-insensitive).

        Anything that is neither "sensor" nor "actuador" is left out of
        both lists.
        """
        documents = await self.store.find_all()
        result = PartitionedRecords()
        for document in documents:
            record = to_record(document)
            kind = (record.kind or "").lower()
            if kind == KIND_SENSOR:
                result.sensores.append(record)
            elif kind == KIND_ACTUATOR:
                result.actuadores.append(record)
        return result

    async def find(self, record_id: str) -> Optional[Record]:
        document = await self.store.find_by_id(record_id)
        if document is None:
            return None
        return to_record(document)

    def build_search_query(self, name: Optional[str] = None, kind: Optional[str] = None) -> dict:
        """
        Turn the search parameters into a MongoDB filter.

        Args:
            name: Substring of "nombre" (case-insensitive)
            kind: "sensores" or "actuadores"

        tipo must equal the mapped kind as a whole value, ignoring case
        ("Sensor" counts), unlike a plain exact match on "sensor".

        Raises:
            InvalidSearchError: Neither parameter given, or a bad kind
        """
        if not name and not kind:
            raise InvalidSearchError("Debe proporcionar al menos un parámetro 'nombre' o 'tipo'")

        query = {}
        if name:
            query["nombre"] = {"$regex": substring_pattern(name), "$options": "i"}
        if kind:
            stored_kind = normalize_search_kind(kind)
            if stored_kind is None:
                raise InvalidSearchError("El tipo debe ser 'sensores' o 'actuadores'")
            # Whole-value match, case-insensitive like list_partitioned
            query["tipo"] = {"$regex": exact_pattern(stored_kind), "$options": "i"}
        return query

    async def search(self, name: Optional[str] = None, kind: Optional[str] = None) -> list[Record]:
        """Records matching every given criterion. May be empty."""
        query = self.build_search_query(name, kind)
        documents = await self.store.find_all(query)
        return [to_record(document) for document in documents]

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create(self, payload: RecordCreate) -> Record:
        """Store a new record and broadcast it."""
        document = await self.store.insert(payload.to_document())
        record = to_record(document)
        logger.info(f"Record created: {record.id} ({record.kind}/{record.name})")
        self._publish(EVENT_SAVED, record)
        return record

    async def update(self, record_id: str, payload: RecordUpdate) -> Optional[Record]:
        """
        Replace the given fields of one record.

        Returns:
            The updated record, or None if there's no record with that ID
        """
        document = await self.store.update_by_id(record_id, payload.to_changes())
        if document is None:
            return None
        record = to_record(document)
        logger.info(f"Record updated: {record.id}")
        self._publish(EVENT_UPDATED, record)
        return record

    async def delete(self, record_id: str) -> Optional[Record]:
        """
        Remove one record.

        Returns:
            The record as it was before deletion, or None if it wasn't there
        """
        document = await self.store.delete_by_id(record_id)
        if document is None:
            return None
        record = to_record(document)
        logger.info(f"Record deleted: {record.id}")
        self._publish(EVENT_DELETED, record)
        return record
