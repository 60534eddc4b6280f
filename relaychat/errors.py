"""Error taxonomy of the relay server.

None of these are fatal. Components raise them and the dispatcher or the
lifecycle manager turns them into silent drops (or an ``error`` frame for
unreadable input).
"""


class RelayChatError(Exception):
    """Base class for relay server errors."""


class RoomNotFound(RelayChatError):
    def __init__(self, room_id):
        super().__init__(f"room {room_id!r} not found")
        self.room_id = room_id


class RecipientOffline(RelayChatError):
    def __init__(self, user_id):
        super().__init__(f"user {user_id!r} is not connected")
        self.user_id = user_id


class MalformedHandshake(RelayChatError):
    """The connection query did not carry both ``userId`` and ``username``."""


class InvalidFrame(RelayChatError):
    """An inbound frame could not be decoded or validated."""
