"""In-memory per-room message history, replayed to members when they join."""
import asyncio
from collections import deque
from typing import Deque, Dict, List, Tuple

from .models import Message


class HistoryStore:
    def __init__(self, limit: int = 0):
        # limit <= 0 keeps every message
        self.limit = limit if limit > 0 else None
        self._logs: Dict[str, Deque[Message]] = {}
        self.lock = asyncio.Lock()

    def _new_log(self) -> Deque[Message]:
        return deque(maxlen=self.limit)

    async def create(self, room_id: str):
        async with self.lock:
            self._logs.setdefault(room_id, self._new_log())

    async def append(self, room_id: str, message: Message):
        async with self.lock:
            log = self._logs.get(room_id)
            if log is None:
                log = self._logs[room_id] = self._new_log()
            log.append(message)

    def history_of(self, room_id: str) -> List[Message]:
        return list(self._logs.get(room_id, ()))

    def all_histories(self) -> List[Tuple[str, List[Message]]]:
        return [(room_id, list(log)) for room_id, log in list(self._logs.items())]
