"""
Records API Router
==================

All the HTTP endpoints for sensors and actuators.

HOW IT WORKS:
------------
1. Client sends an HTTP request
2. FastAPI routes it to the right function here
3. We call the RecordGateway to do the work
4. We send back JSON (errors always look like {"error": "..."})

ALL ENDPOINTS:
-------------
GET    /sensoresactuadores/separados          - Everything, split into sensores / actuadores
POST   /sensoresactuadores                    - Create a record
PUT    /sensoresactuadores/{id}               - Update a record
DELETE /sensoresactuadores/{id}               - Delete a record
GET    /sensoresactuadores/buscar/{id}        - Get one record
GET    /sensoresactuadores/buscar?nombre=&tipo= - Search by name and/or kind

STATUS CODES:
------------
400 - Bad search parameters, or a body we can't use
404 - No record with that ID / nothing matched the search
500 - The database failed (details go to the log, not to the client)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from sensores_api.models import (
    DeleteResponse,
    ErrorResponse,
    PartitionedRecords,
    Record,
    RecordCreate,
    RecordUpdate,
)
from sensores_api.services import InvalidSearchError, RecordGateway, StoreError

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/sensoresactuadores", tags=["sensoresactuadores"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_record_gateway: Optional[RecordGateway] = None  # Set when the app starts


def set_record_gateway(gateway: Optional[RecordGateway]):
    """Called from the app lifespan to hand the routers their gateway."""
    global _record_gateway
    _record_gateway = gateway


def get_record_gateway() -> RecordGateway:
    if _record_gateway is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _record_gateway


NOT_FOUND = {404: {"model": ErrorResponse, "description": "No encontrado"}}
SERVER_ERROR = {500: {"model": ErrorResponse, "description": "Error de base de datos"}}


# =============================================================================
# LIST
# =============================================================================

@router.get("/separados", response_model=PartitionedRecords, responses=SERVER_ERROR)
async def get_partitioned(gateway: RecordGateway = Depends(get_record_gateway)):
    """
    Get sensors and actuators in two separate lists.

    tipo is compared case-insensitively ("Sensor" counts as a sensor).
    Records of any other kind are not returned at all.
    """
    try:
        return await gateway.list_partitioned()
    except StoreError:
        logger.exception("Listing records failed")
        raise HTTPException(status_code=500, detail="Error al obtener los datos")


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

@router.post(
    "",
    response_model=Record,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Error al crear el registro"}},
)
async def create_record(
    payload: RecordCreate,
    gateway: RecordGateway = Depends(get_record_gateway),
):
    """
    Create a new sensor or actuator.

    Send any of: tipo, nombre, valor, unidad (fechaHora is optional too).
    We give back the stored record with its new _id, and every WebSocket
    client gets a record-saved event.
    """
    try:
        return await gateway.create(payload)
    except StoreError:
        logger.exception("Creating record failed")
        raise HTTPException(status_code=400, detail="Error al crear el registro")


@router.put("/{record_id}", response_model=Record, responses={**NOT_FOUND, **SERVER_ERROR})
async def update_record(
    record_id: str,
    payload: RecordUpdate,
    gateway: RecordGateway = Depends(get_record_gateway),
):
    """
    Update a sensor or actuator by ID.

    Only the fields you send are changed. An unknown ID is a 404;
    nothing gets created.
    """
    try:
        record = await gateway.update(record_id, payload)
    except StoreError:
        logger.exception(f"Updating record {record_id} failed")
        raise HTTPException(status_code=500, detail="Error al actualizar")
    if record is None:
        raise HTTPException(status_code=404, detail="No encontrado")
    return record


@router.delete("/{record_id}", response_model=DeleteResponse, responses={**NOT_FOUND, **SERVER_ERROR})
async def delete_record(record_id: str, gateway: RecordGateway = Depends(get_record_gateway)):
    """
    Delete a sensor or actuator by ID.

    There's no undo! Deleting the same ID twice gives a 404 the second time.
    """
    try:
        record = await gateway.delete(record_id)
    except StoreError:
        logger.exception(f"Deleting record {record_id} failed")
        raise HTTPException(status_code=500, detail="Error al eliminar")
    if record is None:
        raise HTTPException(status_code=404, detail="No encontrado")
    return DeleteResponse(registro=record)


# =============================================================================
# SEARCH (must come before /buscar/{id})
# =============================================================================

@router.get(
    "/buscar",
    response_model=list[Record],
    responses={400: {"model": ErrorResponse}, **NOT_FOUND, **SERVER_ERROR},
)
async def search_records(
    nombre: Optional[str] = None,
    tipo: Optional[str] = None,
    gateway: RecordGateway = Depends(get_record_gateway),
):
    """
    Search sensors or actuators.

    - nombre: part of the name, any case (?nombre=temp finds "Temp1")
    - tipo: "sensores" or "actuadores", nothing else

    You need at least one of them. Both together means both must match.
    No matches is a 404, not an empty list.
    """
    try:
        records = await gateway.search(name=nombre, kind=tipo)
    except InvalidSearchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError:
        logger.exception("Searching records failed")
        raise HTTPException(status_code=500, detail="Error al realizar la búsqueda")

    if not records:
        raise HTTPException(status_code=404, detail="No se encontraron dispositivos")
    return records


@router.get("/buscar/{record_id}", response_model=Record, responses={**NOT_FOUND, **SERVER_ERROR})
async def get_record(record_id: str, gateway: RecordGateway = Depends(get_record_gateway)):
    """Get one sensor or actuator by its _id."""
    try:
        record = await gateway.find(record_id)
    except StoreError:
        logger.exception(f"Fetching record {record_id} failed")
        raise HTTPException(status_code=500, detail="Error al buscar el dispositivo")
    if record is None:
        raise HTTPException(status_code=404, detail="Dispositivo no encontrado")
    return record
