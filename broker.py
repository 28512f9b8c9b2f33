from typing import Any, Iterable
import logging

from registry import ConnectionRegistry
from rooms import SessionTable

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Queues outbound events as ``{"event", "data"}`` frames.

    Nothing here awaits a socket: frames go to each participant's outbox
    and its writer task sends them, so a peer that stops reading only
    backs up its own queue.
    """

    def __init__(self, registry: ConnectionRegistry, table: SessionTable):
        self._registry = registry
        self._table = table

    def route_to_others(self, room_id: str, sender_id: str, event: str, payload: Any) -> int:
        """Send to every member of room_id except the sender. Non-members are dropped."""
        if not self._table.is_member(room_id, sender_id):
            logger.debug("drop %s from non-member participant=%s room=%s", event, sender_id, room_id)
            return 0
        targets = [pid for pid in self._table.members(room_id) if pid != sender_id]
        return self._deliver(targets, event, payload)

    def notify_session(self, room_id: str, event: str, payload: Any) -> int:
        return self._deliver(self._table.members(room_id), event, payload)

    def broadcast_all(self, event: str, payload: Any) -> int:
        return self._deliver(self._registry.participant_ids(), event, payload)

    def send_to(self, participant_id: str, event: str, payload: Any) -> int:
        return self._deliver([participant_id], event, payload)

    def _deliver(self, participant_ids: Iterable[str], event: str, payload: Any) -> int:
        """Fire-and-forget. Returns how many frames were queued."""
        frame = {"event": event, "data": payload}
        queued = 0
        for pid in participant_ids:
            outbox = self._registry.get(pid)
            if outbox is not None and outbox.put(frame):
                queued += 1
        return queued
