from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Set, Union
import logging

from config import MAX_ROOM_SIZE

logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    ROOM_FULL = "room_full"


@dataclass(frozen=True)
class Joined:
    room_id: str
    size: int
    added: bool = True


@dataclass(frozen=True)
class Rejected:
    room_id: str
    reason: RejectReason


@dataclass(frozen=True)
class SessionClosed:
    room_id: str


@dataclass(frozen=True)
class SessionShrunk:
    room_id: str
    size: int


JoinResult = Union[Joined, Rejected]
LeaveResult = Union[SessionClosed, SessionShrunk]


class SessionTable:
    """
    Room id -> member ids, bounded at ``capacity``.

    Rooms are created on first join and deleted as soon as they become
    empty, so a room present in the table always has 1..capacity members.
    A reverse index (participant -> room ids) is kept in step with the
    forward map so ``leave`` never scans every room.
    """

    def __init__(self, capacity: int = MAX_ROOM_SIZE):
        self.capacity = capacity
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = defaultdict(set)

    def join(self, room_id: str, participant_id: str) -> JoinResult:
        members = self._rooms.get(room_id)
        if members is not None and participant_id in members:
            return Joined(room_id, len(members), added=False)
        if members is not None and len(members) >= self.capacity:
            return Rejected(room_id, RejectReason.ROOM_FULL)

        if members is None:
            members = self._rooms[room_id] = set()
        members.add(participant_id)
        self._memberships[participant_id].add(room_id)
        logger.debug("join room=%s participant=%s size=%d", room_id, participant_id, len(members))
        return Joined(room_id, len(members))

    def leave(self, participant_id: str) -> list[LeaveResult]:
        room_ids = self._memberships.pop(participant_id, set())
        results: list[LeaveResult] = []
        # sorted for a deterministic notification order
        for room_id in sorted(room_ids):
            members = self._rooms[room_id]
            members.discard(participant_id)
            if not members:
                del self._rooms[room_id]
                results.append(SessionClosed(room_id))
            else:
                results.append(SessionShrunk(room_id, len(members)))
        return results

    def size_of(self, room_id: str) -> int:
        return len(self._rooms.get(room_id, ()))

    def members(self, room_id: str) -> frozenset[str]:
        return frozenset(self._rooms.get(room_id, ()))

    def is_member(self, room_id: str, participant_id: str) -> bool:
        return participant_id in self._rooms.get(room_id, ())

    def rooms_of(self, participant_id: str) -> frozenset[str]:
        return frozenset(self._memberships.get(participant_id, ()))

    def snapshot(self) -> dict[str, int]:
        return {room_id: len(members) for room_id, members in self._rooms.items()}

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
