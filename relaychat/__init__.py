"""relaychat: presence, rooms and direct messages over a WebSocket event channel."""

__version__ = "0.1.0"
