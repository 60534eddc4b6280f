"""Room directory: room metadata and membership."""
import asyncio
import logging
from typing import Dict, List, Optional

from .errors import RoomNotFound
from .models import RoomInfo, new_id

logger = logging.getLogger(__name__)


class Room:
    """A named room. Members are kept in join order without duplicates."""

    def __init__(self, room_id: str, name: str):
        self.id = room_id
        self.name = name
        self._members: Dict[str, None] = {}

    @property
    def members(self) -> List[str]:
        return list(self._members)

    def add(self, user_id: str) -> bool:
        if user_id in self._members:
            return False
        self._members[user_id] = None
        return True

    def discard(self, user_id: str) -> bool:
        if user_id not in self._members:
            return False
        del self._members[user_id]
        return True

    def info(self) -> RoomInfo:
        return RoomInfo(id=self.id, name=self.name, members=self.members)


class RoomDirectory:
    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self.lock = asyncio.Lock()

    async def create_room(self, name: str, creator_id: str) -> Room:
        room = Room(new_id(), name)
        room.add(creator_id)
        async with self.lock:
            self._rooms[room.id] = room
        logger.info("ROOM_CREATED room_id=%s name=%s creator=%s", room.id, name, creator_id)
        return room

    async def join_room(self, room_id: str, user_id: str) -> bool:
        """Add ``user_id`` to the room. Returns False if they were already a member."""
        async with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            return room.add(user_id)

    async def leave_room(self, room_id: str, user_id: str) -> bool:
        async with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                return False
            return room.discard(user_id)

    async def leave_all(self, user_id: str) -> List[str]:
        """Remove ``user_id`` from every room; returns the ids of the rooms left."""
        async with self.lock:
            return [room.id for room in self._rooms.values() if room.discard(user_id)]

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def list_rooms(self) -> List[RoomInfo]:
        return [room.info() for room in list(self._rooms.values())]

    def members_of(self, room_id: str) -> List[str]:
        room = self._rooms.get(room_id)
        return room.members if room else []

    def __len__(self):
        return len(self._rooms)
