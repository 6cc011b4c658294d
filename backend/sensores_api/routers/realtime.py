"""
Realtime WebSocket Router
=========================

WS /ws - live feed of record changes, plus a second way in for readings.

Protocol (JSON text frames):
  Client -> {"event": "new-reading", "data": {"tipo": "sensor", "nombre": "Temp1", "valor": 22.5}}
  Server -> {"event": "record-saved" | "record-updated" | "record-deleted", "data": {...record...}}

A "new-reading" is stored exactly like POST /sensoresactuadores and then
broadcast to everyone (the sender included). Nothing is sent back if it
fails; we just log it.

No handshake, no auth, no acks.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket
from pydantic import ValidationError

from sensores_api.models import RealtimeMessage, RecordCreate
from sensores_api.routers.records import get_record_gateway
from sensores_api.services import ChangeNotifier, RecordGateway, StoreError
from sensores_api.services.change_notifier import EVENT_NEW_READING

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


_notifier = None  # Set when the app starts


def set_notifier(notifier):
    global _notifier
    _notifier = notifier


def get_notifier() -> ChangeNotifier:
    if _notifier is None:
        raise RuntimeError("Server not fully started yet")
    return _notifier


async def handle_message(raw: str, gateway: RecordGateway):
    """
    Handle one inbound frame. Never raises for bad input.

    Args:
        raw: The text frame as received
        gateway: Where new readings are stored
    """
    try:
        message = RealtimeMessage.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"[WS] Ignoring malformed frame: {e.error_count()} errors")
        return

    if message.event != EVENT_NEW_READING:
        logger.warning(f"[WS] Ignoring unknown event: {message.event}")
        return

    try:
        payload = RecordCreate.model_validate(message.data)
        await gateway.create(payload)
    except ValidationError as e:
        logger.error(f"[WS] Error saving reading: invalid payload ({e.error_count()} errors)")
    except StoreError:
        logger.exception("[WS] Error saving reading")


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    notifier: ChangeNotifier = Depends(get_notifier),
    gateway: RecordGateway = Depends(get_record_gateway),
):
    await notifier.connect(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            if frame.get("text") is None:
                logger.warning("[WS] Ignoring binary frame")
                continue
            await handle_message(frame["text"], gateway)
    finally:
        notifier.disconnect(websocket)
