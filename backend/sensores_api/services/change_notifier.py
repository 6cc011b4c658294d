"""
Change Notifier
===============

Tells every connected WebSocket client when a record changes.

EVENTS:
------
- record-saved    : a record was created (HTTP POST or "new-reading")
- record-updated  : a record was updated
- record-deleted  : a record was deleted

Every frame looks like:
    {"event": "record-saved", "data": {...the record...}}

FIRE AND FORGET:
---------------
publish() never waits. Each subscriber gets its own send task, so a slow
or dead client can't hold up the HTTP response that caused the event.
If a send fails (or takes longer than send_timeout) that client is
dropped from the registry. No acks, no retries, no replay for late joiners.
"""

import asyncio
import logging

from fastapi import WebSocket

from sensores_api.models import Record

logger = logging.getLogger(__name__)


EVENT_SAVED = "record-saved"
EVENT_UPDATED = "record-updated"
EVENT_DELETED = "record-deleted"
EVENT_NEW_READING = "new-reading"


class ChangeNotifier:
    """
    In-memory registry of active WebSocket connections plus broadcast.

    The registry is only touched from the event loop, so no locking.
    """

    def __init__(self, send_timeout: float = 5.0):
        """
        Args:
            send_timeout: Seconds a single send may take before the
                          subscriber is considered gone.
        """
        self.send_timeout = send_timeout
        self._connections: set[WebSocket] = set()
        self._pending: set[asyncio.Task] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._connections)

    # =========================================================================
    # CONNECTION LIFECYCLE
    # =========================================================================

    async def connect(self, websocket: WebSocket):
        """Accept the handshake and start sending this client every event."""
        await websocket.accept()
        self._connections.add(websocket)
        logger.info(f"Client connected ({self.subscriber_count} subscribers)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self._connections:
            self._connections.discard(websocket)
            logger.info(f"Client disconnected ({self.subscriber_count} subscribers)")

    # =========================================================================
    # BROADCAST
    # =========================================================================

    def publish(self, event: str, record: Record):
        """
        Send ``record`` to every subscriber under ``event``.

        Returns immediately; delivery happens in background tasks.
        """
        message = {"event": event, "data": record.to_json()}
        for websocket in list(self._connections):
            task = asyncio.create_task(self._deliver(websocket, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        logger.debug(f"Published {event} for {record.id} to {self.subscriber_count} subscribers")

    async def _deliver(self, websocket: WebSocket, message: dict):
        try:
            await asyncio.wait_for(websocket.send_json(message), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Subscriber too slow for {message['event']}, dropping it")
            await self._drop(websocket)
        except Exception as e:
            # Closed sockets raise different errors depending on the server
            logger.warning(f"Could not deliver {message['event']}: {e}")
            await self._drop(websocket)

    async def _drop(self, websocket: WebSocket):
        """Unregister and close, so the client knows it's no longer subscribed."""
        self.disconnect(websocket)
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Error closing dropped subscriber: {e}")

    async def drain(self):
        """Wait for every in-flight delivery to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self):
        """Cancel pending sends and close every connection (shutdown)."""
        for task in list(self._pending):
            task.cancel()
        await self.drain()

        for websocket in list(self._connections):
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing subscriber: {e}")
        self._connections.clear()
