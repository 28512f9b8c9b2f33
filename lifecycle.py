import json
import logging
from typing import Any

from fastapi import WebSocket
from pydantic import ValidationError

from broker import MessageRouter
from registry import ConnectionRegistry
from rooms import Rejected, SessionClosed, SessionShrunk, SessionTable
from schemas import RELAY_MODELS, InboundFrame, JoinRequest

logger = logging.getLogger(__name__)


class SignalingError(Exception):
    """Misuse of the coordinator API; never sent to clients."""


class LifecycleCoordinator:
    """
    Owns the registry, the session table and the router, and turns
    inbound events into table mutations plus outbound notifications.

    Handlers never await: each one mutates the table and queues its frames
    in a single step on the event loop, so events apply one at a time in
    arrival order and per-peer frame order follows event order. A
    multi-threaded host would need a lock around every handler.
    """

    def __init__(self, registry: ConnectionRegistry | None = None, table: SessionTable | None = None):
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.table = table if table is not None else SessionTable()
        self.router = MessageRouter(self.registry, self.table)

    def connect(self, ws: WebSocket) -> str:
        participant_id = self.registry.register(ws)
        logger.info("Client connected: %s", participant_id)
        return participant_id

    def disconnect(self, participant_id: str):
        self.registry.unregister(participant_id)
        for result in self.table.leave(participant_id):
            if isinstance(result, SessionClosed):
                logger.info("room=%s empty, available again", result.room_id)
                self.router.broadcast_all("room_available", {"roomId": result.room_id})
            elif isinstance(result, SessionShrunk):
                self.router.notify_session(
                    result.room_id,
                    "room_status",
                    {"size": result.size, "isRoomFull": result.size >= self.table.capacity},
                )
        logger.info("Client disconnected: %s", participant_id)

    def join(self, participant_id: str, room_id: str):
        if participant_id not in self.registry:
            raise SignalingError(f"unknown participant {participant_id!r}")
        result = self.table.join(room_id, participant_id)
        if isinstance(result, Rejected):
            logger.info("participant=%s rejected from room=%s: %s", participant_id, room_id, result.reason.value)
            self.router.send_to(participant_id, "room_full", {"roomId": room_id})
            return result
        if not result.added:
            return result

        is_full = result.size >= self.table.capacity
        logger.info("Client %s joined room=%s size=%d", participant_id, room_id, result.size)
        self.router.notify_session(room_id, "room_status", {"size": result.size, "isRoomFull": is_full})
        if is_full:
            self.router.broadcast_all("room_closed", {"roomId": room_id})
        return result

    def relay(self, participant_id: str, event: str, room_id: str, payload: Any) -> int:
        if event not in RELAY_MODELS:
            raise SignalingError(f"{event!r} is not a relay event")
        return self.router.route_to_others(room_id, participant_id, event, payload)

    def dispatch(self, participant_id: str, raw: str):
        """Handle one inbound text frame. Bad input is logged and dropped."""
        try:
            frame = InboundFrame.model_validate(json.loads(raw))
            if frame.event == "join":
                if isinstance(frame.data, str):
                    room_id = frame.data
                else:
                    room_id = JoinRequest.model_validate(frame.data).room_id
                self.join(participant_id, room_id)
            elif frame.event in RELAY_MODELS:
                message = RELAY_MODELS[frame.event].model_validate(frame.data)
                self.relay(participant_id, frame.event, message.room_id, message.relay_payload())
            else:
                logger.warning("participant=%s unknown event %r", participant_id, frame.event)
        except (json.JSONDecodeError, RecursionError, ValidationError) as e:
            logger.warning("participant=%s malformed frame: %s", participant_id, e)
        except SignalingError as e:
            logger.warning("participant=%s: %s", participant_id, e)
