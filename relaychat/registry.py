"""Connection registry: who is online and which connection reaches them."""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import UserInfo

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    def __init__(self):
        self._entries: Dict[str, Tuple[Any, str]] = {}  # user_id -> (connection, username)
        self.lock = asyncio.Lock()

    async def register(self, connection, user_id: str, username: str):
        """Bind ``user_id`` to ``connection``. A previous entry for the same id is replaced."""
        async with self.lock:
            if user_id in self._entries:
                logger.info("USER_REPLACED user_id=%s", user_id)
            self._entries[user_id] = (connection, username)

    async def deregister(self, user_id: str, connection=None) -> bool:
        """Remove ``user_id``; returns False when nothing was removed.

        With ``connection`` given, the entry is only removed while it still
        belongs to that connection.
        """
        async with self.lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return False
            if connection is not None and entry[0] is not connection:
                return False
            del self._entries[user_id]
            return True

    def lookup(self, user_id: str) -> Optional[Any]:
        entry = self._entries.get(user_id)
        return entry[0] if entry else None

    def username_of(self, user_id: str) -> Optional[str]:
        entry = self._entries.get(user_id)
        return entry[1] if entry else None

    def owns(self, user_id: str, connection) -> bool:
        return self.lookup(user_id) is connection

    def list_online(self) -> List[UserInfo]:
        return [UserInfo(id=uid, username=name) for uid, (_, name) in list(self._entries.items())]

    def __len__(self):
        return len(self._entries)
