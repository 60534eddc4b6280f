"""Per-connection lifecycle: identify on connect, clean up on disconnect."""
import enum
import logging
from typing import List, Mapping, Optional

from .broadcaster import Broadcaster
from .errors import MalformedHandshake
from .models import Delivery
from .state import ChatState

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


class Session:
    """One client connection and the identity it presented, if any."""

    def __init__(self, connection):
        self.connection = connection
        self.user_id: Optional[str] = None
        self.username: Optional[str] = None
        self.state = SessionState.CONNECTING

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def __repr__(self):
        return f"<Session user_id={self.user_id!r} state={self.state.value}>"


def parse_handshake(query: Mapping[str, str]):
    user_id = query.get("userId")
    username = query.get("username")
    if not user_id or not username:
        raise MalformedHandshake("handshake needs both userId and username")
    return user_id, username


class ConnectionLifecycle:
    def __init__(self, state: ChatState, broadcaster: Broadcaster):
        self.state = state
        self.broadcaster = broadcaster

    async def connect(self, session: Session, query: Mapping[str, str]) -> List[Delivery]:
        """Register the session and build the initial snapshot for it.

        Without a usable identity the session stays inert: it receives global
        broadcasts but cannot send or receive anything identity-bound.
        """
        try:
            user_id, username = parse_handshake(query)
        except MalformedHandshake as e:
            logger.info("ANONYMOUS_CONNECTION reason=%s", e)
            return []

        session.user_id = user_id
        session.username = username
        await self.state.registry.register(session.connection, user_id, username)
        session.state = SessionState.ACTIVE
        logger.info("USER_CONNECTED user_id=%s username=%s online=%d", user_id, username, len(self.state.registry))

        deliveries = [
            self.broadcaster.user_list(exclude=session.connection),
            self.broadcaster.user_list_for(session.connection, user_id),
            self.broadcaster.room_list(session.connection),
        ]
        for room_id, messages in self.state.history.all_histories():
            deliveries.append(self.broadcaster.history(session.connection, room_id, messages))
        return deliveries

    async def disconnect(self, session: Session) -> List[Delivery]:
        was_active = session.active
        session.state = SessionState.CLOSED
        if not was_active:
            return []

        registry = self.state.registry
        if not registry.owns(session.user_id, session.connection):
            # a newer connection took over this user id; leave its state alone
            logger.info("STALE_SESSION_CLOSED user_id=%s", session.user_id)
            return []

        deliveries = []
        # leave notices go out while the session still carries the display name
        for room_id in await self.state.rooms.leave_all(session.user_id):
            deliveries.append(self.broadcaster.room_left(room_id, session.username))
        await registry.deregister(session.user_id, session.connection)
        deliveries.append(self.broadcaster.user_list())
        logger.info("USER_DISCONNECTED user_id=%s online=%d", session.user_id, len(registry))
        return deliveries
