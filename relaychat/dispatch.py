"""Inbound event dispatch.

Each handler takes the session and a validated event, mutates shared state
and returns the deliveries to send. Nothing here touches a socket.
"""
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from .broadcaster import Broadcaster
from .errors import InvalidFrame, RoomNotFound
from .framing import decode_frame
from .lifecycle import Session
from .models import (
    SIGNAL_EVENTS, CreateRoomIn, Delivery, PrivateMessageIn, RoomMessageIn, RoomRef, SignalIn,
)
from .router import MessageRouter
from .state import ChatState

logger = logging.getLogger(__name__)

INBOUND_MODELS = {
    "private-message": PrivateMessageIn,
    "create-room": CreateRoomIn,
    "room-message": RoomMessageIn,
    "join-room": RoomRef,
    "leave-room": RoomRef,
}
INBOUND_MODELS.update({kind: SignalIn for kind in SIGNAL_EVENTS})


def parse_event(frame: Dict[str, Any]):
    """Validate a decoded frame; returns ``(type, model)``."""
    kind = frame.get("type")
    if not isinstance(kind, str):
        raise InvalidFrame(f"unknown type {kind!r}")
    model = INBOUND_MODELS.get(kind)
    if model is None:
        raise InvalidFrame(f"unknown type {kind!r}")
    try:
        return kind, model.model_validate({k: v for k, v in frame.items() if k != "type"})
    except ValidationError as e:
        raise InvalidFrame(f"bad {kind} payload: {e.error_count()} error(s)") from e


class EventDispatcher:
    def __init__(self, state: ChatState, router: MessageRouter, broadcaster: Broadcaster):
        self.state = state
        self.router = router
        self.broadcaster = broadcaster
        self._handlers = {
            "private-message": self.on_private_message,
            "create-room": self.on_create_room,
            "room-message": self.on_room_message,
            "join-room": self.on_join_room,
            "leave-room": self.on_leave_room,
        }

    def _reject(self, session: Session, error: InvalidFrame) -> List[Delivery]:
        logger.warning("INVALID_FRAME user_id=%s reason=%s", session.user_id, error)
        return [Delivery.to_connection(session.connection, "error", {"why": str(error)})]

    async def handle_message(self, session: Session, message: Dict[str, Any]) -> List[Delivery]:
        """Handle one received WebSocket message; only text frames carry events."""
        text = message.get("text")
        if text is None:
            return self._reject(session, InvalidFrame("binary frames are not supported"))
        return await self.handle_text(session, text)

    async def handle_text(self, session: Session, text: str) -> List[Delivery]:
        try:
            frame = decode_frame(text)
        except InvalidFrame as e:
            return self._reject(session, e)
        return await self.dispatch(session, frame)

    async def dispatch(self, session: Session, frame: Dict[str, Any]) -> List[Delivery]:
        """Handle one decoded frame from ``session``.

        Unreadable frames are answered with an ``error`` event; everything
        else that cannot be delivered is dropped without telling the sender.
        """
        try:
            kind, event = parse_event(frame)
        except InvalidFrame as e:
            return self._reject(session, e)

        if not session.active:
            logger.debug("IGNORED_ANONYMOUS type=%s", kind)
            return []

        if kind in SIGNAL_EVENTS:
            return self.router.route_signal(session.user_id, kind, event)
        try:
            return await self._handlers[kind](session, event)
        except RoomNotFound as e:
            logger.debug("ROOM_EVENT_DROPPED type=%s user_id=%s reason=%s", kind, session.user_id, e)
            return []

    async def on_private_message(self, session: Session, event: PrivateMessageIn):
        return self.router.route_direct(session.user_id, event)

    async def on_room_message(self, session: Session, event: RoomMessageIn):
        return await self.router.route_room(session.user_id, session.username, event)

    async def on_create_room(self, session: Session, event: CreateRoomIn):
        room = await self.state.rooms.create_room(event.name, session.user_id)
        await self.state.history.create(room.id)
        return [
            Delivery.to_connection(session.connection, "room-created", room.info().to_wire()),
            self.broadcaster.room_list(),
        ]

    async def on_join_room(self, session: Session, event: RoomRef):
        if not await self.state.rooms.join_room(event.room_id, session.user_id):
            return []
        logger.info("ROOM_JOINED room_id=%s user_id=%s", event.room_id, session.user_id)
        return [
            self.broadcaster.history(session.connection, event.room_id),
            self.broadcaster.room_joined(event.room_id, session.username),
        ]

    async def on_leave_room(self, session: Session, event: RoomRef):
        if not await self.state.rooms.leave_room(event.room_id, session.user_id):
            return []
        logger.info("ROOM_LEFT room_id=%s user_id=%s", event.room_id, session.user_id)
        return [self.broadcaster.room_left(event.room_id, session.username)]
