from fastapi import WebSocket
from typing import Any, Dict, Optional
from uuid import uuid4
import asyncio
import logging

from config import OUTBOX_SIZE

logger = logging.getLogger(__name__)


class Outbox:
    """Send queue for one participant, drained by its own writer task."""

    def __init__(self, participant_id: str, ws: WebSocket, maxsize: int = OUTBOX_SIZE):
        self.participant_id = participant_id
        self.ws = ws
        self._queue: asyncio.Queue = asyncio.Queue(maxsize)
        self._writer = asyncio.create_task(self._drain())

    def put(self, frame: Dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning("outbox full, drop %s for participant=%s", frame.get("event"), self.participant_id)
            return False
        return True

    async def _drain(self):
        while True:
            frame = await self._queue.get()
            try:
                await self.ws.send_json(frame)
            except Exception as e:
                logger.debug("send %s to participant=%s failed: %s", frame.get("event"), self.participant_id, e)
            finally:
                self._queue.task_done()

    async def flush(self):
        await self._queue.join()

    def close(self):
        self._writer.cancel()


class ConnectionRegistry:
    """Live participants keyed by an opaque id."""

    def __init__(self, outbox_size: int = OUTBOX_SIZE):
        self._outbox_size = outbox_size
        self._outboxes: Dict[str, Outbox] = {}

    def register(self, ws: WebSocket) -> str:
        """Must be called from a running event loop; starts the writer task."""
        participant_id = uuid4().hex
        self._outboxes[participant_id] = Outbox(participant_id, ws, self._outbox_size)
        logger.debug("register participant=%s total=%d", participant_id, len(self._outboxes))
        return participant_id

    def unregister(self, participant_id: str):
        outbox = self._outboxes.pop(participant_id, None)
        if outbox is not None:
            outbox.close()

    def get(self, participant_id: str) -> Optional[Outbox]:
        return self._outboxes.get(participant_id)

    def participant_ids(self) -> list[str]:
        return list(self._outboxes.keys())

    async def drain(self, *participant_ids: str):
        """Wait until queued frames are written, for the given ids or everyone."""
        ids = participant_ids or self.participant_ids()
        outboxes = [self._outboxes[pid] for pid in ids if pid in self._outboxes]
        await asyncio.gather(*(outbox.flush() for outbox in outboxes))

    def close_all(self):
        for outbox in self._outboxes.values():
            outbox.close()
        self._outboxes.clear()

    def __contains__(self, participant_id: str) -> bool:
        return participant_id in self._outboxes

    def __len__(self) -> int:
        return len(self._outboxes)
