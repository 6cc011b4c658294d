"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from sensores_api.models import Record, RecordCreate
"""

from .record import (
    # Kind conventions
    KIND_SENSOR,
    KIND_ACTUATOR,
    SEARCH_KINDS,
    RecordValue,

    # What clients send us
    RecordCreate,
    RecordUpdate,

    # What we send back
    Record,
    PartitionedRecords,
    DeleteResponse,
    ErrorResponse,

    # WebSocket frames
    RealtimeMessage,
)

__all__ = [
    "KIND_SENSOR",
    "KIND_ACTUATOR",
    "SEARCH_KINDS",
    "RecordValue",
    "RecordCreate",
    "RecordUpdate",
    "Record",
    "PartitionedRecords",
    "DeleteResponse",
    "ErrorResponse",
    "RealtimeMessage",
]
