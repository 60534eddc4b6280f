"""Shared server state handed to every handler."""
from dataclasses import dataclass, field

from .history import HistoryStore
from .registry import ConnectionRegistry
from .rooms import RoomDirectory


@dataclass
class ChatState:
    registry: ConnectionRegistry = field(default_factory=ConnectionRegistry)
    rooms: RoomDirectory = field(default_factory=RoomDirectory)
    history: HistoryStore = field(default_factory=HistoryStore)

    @classmethod
    def from_settings(cls, settings):
        return cls(history=HistoryStore(limit=settings.history_limit))
