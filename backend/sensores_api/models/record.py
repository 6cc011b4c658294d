"""
Record Models
=============
Pydantic models for sensor/actuator records.

Every sensor and actuator lives in ONE MongoDB collection and shares ONE
shape. The JSON keys are the Spanish names the frontend already uses:

    {
        "_id": "665f1c2e9b1e8a3d4c2b1a00",
        "tipo": "sensor",
        "nombre": "Temp1",
        "valor": 22.5,
        "unidad": "C",
        "fechaHora": "2026-10-19T12:00:00.123000Z"
    }

- Request models: What clients send (every field optional)
- Response models: What we send back
- Realtime models: What travels over the WebSocket channel

Author: Sensor Data Collector Team
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# KINDS
# =============================================================================

# Conventional values of "tipo". Nothing enforces them on write.
KIND_SENSOR = "sensor"
KIND_ACTUATOR = "actuador"

# Search parameter literal -> stored kind
SEARCH_KINDS = {
    "sensores": KIND_SENSOR,
    "actuadores": KIND_ACTUATOR,
}

# Sensors report numbers, actuators report states. Both share "valor".
RecordValue = Union[bool, int, float, str, list, dict, None]


def to_millis(moment: datetime) -> datetime:
    """Truncate to milliseconds, the precision of a BSON date."""
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def utc_now() -> datetime:
    return to_millis(datetime.now(timezone.utc))


# =============================================================================
# REQUEST MODELS
# =============================================================================

class RecordCreate(BaseModel):
    """
    Request body for creating a record.

    Every field is optional. Missing fields are simply not stored, and
    fechaHora falls back to the moment of insertion.

    Example Request:
        POST /sensoresactuadores
        {
            "tipo": "Sensor",
            "nombre": "Temp1",
            "valor": 22.5,
            "unidad": "C"
        }
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    kind: Optional[str] = Field(None, alias="tipo", description="sensor / actuador", examples=["sensor"])
    name: Optional[str] = Field(None, alias="nombre", description="Human-readable label", examples=["Temp1"])
    value: RecordValue = Field(None, alias="valor", description="Reading or state", examples=[22.5, "encendido"])
    unit: Optional[str] = Field(None, alias="unidad", description="Unit label", examples=["C"])
    timestamp: Optional[datetime] = Field(None, alias="fechaHora", description="Defaults to insertion time")

    def to_document(self) -> dict:
        """Build the MongoDB document to insert."""
        document = self.model_dump(by_alias=True, exclude_unset=True)
        document["fechaHora"] = to_millis(self.timestamp) if self.timestamp else utc_now()
        return document


class RecordUpdate(RecordCreate):
    """
    Request body for updating a record.

    Only the fields present in the body are replaced.
    """

    def to_changes(self) -> dict:
        """Fields to $set, keyed by their stored names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class Record(BaseModel):
    """
    A stored sensor/actuator record.

    Built straight from a MongoDB document; the ObjectId is rendered as a
    hex string under "_id".
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(..., alias="_id", description="Store-assigned identifier")
    kind: Optional[str] = Field(None, alias="tipo")
    name: Optional[str] = Field(None, alias="nombre")
    value: RecordValue = Field(None, alias="valor")
    unit: Optional[str] = Field(None, alias="unidad")
    timestamp: Optional[datetime] = Field(None, alias="fechaHora")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Mongo hands back naive datetimes unless the client is tz-aware
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_document(cls, document: dict) -> "Record":
        return cls.model_validate(document)

    def to_json(self) -> dict:
        """JSON-ready dict with the wire (Spanish) keys."""
        return self.model_dump(mode="json", by_alias=True)


class PartitionedRecords(BaseModel):
    """Response of GET /sensoresactuadores/separados."""
    sensores: list[Record] = Field(default_factory=list)
    actuadores: list[Record] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Response of DELETE /sensoresactuadores/{id}."""
    mensaje: str = Field("Registro eliminado", description="Confirmation message")
    registro: Record = Field(..., description="The record as it was before deletion")


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str


# =============================================================================
# REALTIME MODELS
# =============================================================================

class RealtimeMessage(BaseModel):
    """
    A frame on the WebSocket channel.

    Inbound:  {"event": "new-reading", "data": {...record fields...}}
    Outbound: {"event": "record-saved", "data": {...stored record...}}
    """
    event: str
    data: dict = Field(default_factory=dict)
