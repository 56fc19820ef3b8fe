"""
==============================================================================
Storefront WebSocket Module
==============================================================================

Push-based view binding: every state change is sent to the client as a
fresh snapshot, replacing the browser's re-render-on-state-change.

Flow:
-----
1. Client connects
2. Server sends the current snapshot
3. Client sends filter/search/cart actions
4. Server pushes a snapshot after each resulting state change, including
   the later settlement of catalog requests

Messages (Client → Server):
---------------------------
- {"type": "set_category", "category": "jersey"}
- {"type": "set_team", "team": "Ferrari"}
- {"type": "set_query", "query": "sf-24"}
- {"type": "add_to_cart", "product_id": "fer-sf24-118"}
- {"type": "retry"}
- {"type": "get_state"}
- {"type": "stop"}

Messages (Server → Client):
---------------------------
- {"type": "snapshot", "storefront": {...}}
- {"type": "error", "code": "...", "message": "..."}

==============================================================================
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.core import exceptions
from app.core.dependencies import get_storefront_ws
from app.core.exceptions import AppException
from app.store.controller import StorefrontController


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class StorefrontWebSocketHandler:
    """
    Handler for the storefront WebSocket.

    Subscribes to the controller for the lifetime of the connection and
    relays snapshots through a queue drained by a sender task, so the
    controller's synchronous notifications never block on the socket.
    """

    def __init__(self, websocket: WebSocket, storefront: StorefrontController):
        self._websocket = websocket
        self._storefront = storefront
        self._outbox: "asyncio.Queue[dict]" = asyncio.Queue()
        self._sender: Optional[asyncio.Task] = None

    def _on_change(self, storefront: StorefrontController) -> None:
        """Queue a snapshot for every state change."""
        self._outbox.put_nowait(self._snapshot_message())

    def _snapshot_message(self) -> dict:
        return {
            "type": "snapshot",
            "storefront": self._storefront.snapshot().model_dump(mode="json")
        }

    async def _send_loop(self) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self._websocket.send_json(message)
            finally:
                self._outbox.task_done()

    async def _send_error(self, message: str, code: str = "ERROR") -> None:
        """Queue an error message behind any pending snapshots."""
        await self._outbox.put({
            "type": "error",
            "code": code,
            "message": message
        })

    async def handle_set_category(self, data: dict) -> None:
        category = data.get("category")
        if not isinstance(category, str):
            await self._send_error("Category is required", "MISSING_CATEGORY")
            return
        self._storefront.set_category(category)

    async def handle_set_team(self, data: dict) -> None:
        team = data.get("team")
        if not isinstance(team, str) or not team.strip():
            await self._send_error("Team is required", "MISSING_TEAM")
            return
        self._storefront.set_team(team.strip())

    async def handle_set_query(self, data: dict) -> None:
        query = data.get("query", "")
        if not isinstance(query, str):
            await self._send_error("Query must be a string", "INVALID_QUERY")
            return
        self._storefront.set_query(query)

    async def handle_add_to_cart(self, data: dict) -> None:
        product_id = data.get("product_id")
        if not product_id:
            await self._send_error("Product id is required", "MISSING_PRODUCT_ID")
            return

        product = self._storefront.find_product(str(product_id))
        if product is None:
            raise exceptions.product_not_found(str(product_id))
        self._storefront.add_to_cart(product)

    async def handle_get_state(self) -> None:
        await self._outbox.put(self._snapshot_message())

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("🛍️ Storefront WebSocket connected")

        unsubscribe = self._storefront.subscribe(self._on_change)
        self._sender = asyncio.create_task(self._send_loop())
        await self.handle_get_state()

        try:
            while True:
                data = await self._websocket.receive_json()
                msg_type = data.get("type") if isinstance(data, dict) else None

                try:
                    if msg_type == "set_category":
                        await self.handle_set_category(data)
                    elif msg_type == "set_team":
                        await self.handle_set_team(data)
                    elif msg_type == "set_query":
                        await self.handle_set_query(data)
                    elif msg_type == "add_to_cart":
                        await self.handle_add_to_cart(data)
                    elif msg_type == "retry":
                        self._storefront.retry()
                    elif msg_type == "get_state":
                        await self.handle_get_state()
                    elif msg_type == "stop":
                        logger.info("🛑 Client requested stop")
                        break
                    else:
                        await self._send_error(f"Unknown message type: {msg_type}", "UNKNOWN_TYPE")
                except AppException as e:
                    await self._send_error(e.message, e.code)

        except WebSocketDisconnect:
            logger.info("🛍️ Storefront client disconnected")
        finally:
            unsubscribe()
            await self._drain_and_stop()
            logger.info("✅ Storefront WebSocket closed")

    async def _drain_and_stop(self) -> None:
        """Flush queued messages, then stop the sender."""
        if self._sender is None:
            return
        if not self._sender.done():
            try:
                await asyncio.wait_for(self._outbox.join(), timeout=1.0)
            except asyncio.TimeoutError:
                logger.debug("Dropping unsent storefront messages")
            self._sender.cancel()
        try:
            await self._sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Sender stopped: {e!r}")


@router.websocket("/ws/storefront")
async def websocket_storefront(
    websocket: WebSocket,
    storefront: StorefrontController = Depends(get_storefront_ws)
):
    """
    WebSocket endpoint streaming storefront snapshots.

    Allows a client to:
    1. Receive the current snapshot on connect
    2. Change filters and search text
    3. Add products to the cart
    4. Receive a snapshot after every change
    """
    handler = StorefrontWebSocketHandler(websocket, storefront)
    await handler.run()
