"""
Services Package
================

These are the "workers" that do the actual work.

- RecordStore: Talks to MongoDB
- RecordGateway: CRUD + search over records, triggers broadcasts
- ChangeNotifier: Keeps track of WebSocket clients and broadcasts to them
"""

from .record_store import RecordStore, StoreError
from .change_notifier import ChangeNotifier
from .record_gateway import RecordGateway, InvalidSearchError

__all__ = [
    "RecordStore",
    "StoreError",
    "ChangeNotifier",
    "RecordGateway",
    "InvalidSearchError",
]
