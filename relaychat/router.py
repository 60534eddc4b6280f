"""Message routing.

The router decides who receives a message and records room messages in the
history store. It returns ``Delivery`` objects instead of writing to sockets,
so the transport stays out of the routing rules.
"""
import logging
from typing import List

from .errors import RecipientOffline, RoomNotFound
from .models import Delivery, Message, MessageBody, PrivateMessageIn, RoomMessageIn, SignalIn, new_id, now_ms
from .state import ChatState

logger = logging.getLogger(__name__)


class MessageRouter:
    def __init__(self, state: ChatState):
        self.state = state
        self._last_ts = 0

    def _stamp(self) -> int:
        # never step backwards, even if the wall clock does
        self._last_ts = max(self._last_ts, now_ms())
        return self._last_ts

    def _build(self, sender: str, body: MessageBody) -> Message:
        return Message(
            id=new_id(),
            sender=sender,
            message=body.message,
            is_file=body.is_file,
            is_encrypted=body.is_encrypted,
            file_content=body.file_content,
            timestamp=self._stamp(),
        )

    def _require_online(self, user_id: str):
        if self.state.registry.lookup(user_id) is None:
            raise RecipientOffline(user_id)

    def route_direct(self, sender_id: str, event: PrivateMessageIn) -> List[Delivery]:
        """Deliver a private message to its recipient only. Offline recipients get nothing."""
        try:
            self._require_online(event.to)
        except RecipientOffline as e:
            logger.debug("DIRECT_DROPPED sender=%s reason=%s", sender_id, e)
            return []
        message = self._build(sender_id, event)
        logger.info("DIRECT_MESSAGE sender=%s recipient=%s message_id=%s", sender_id, event.to, message.id)
        return [Delivery.to_users([event.to], "private-message", message.to_wire())]

    async def route_room(self, sender_id: str, sender_name: str, event: RoomMessageIn) -> List[Delivery]:
        """Record a room message and fan it out to every member, the sender included.

        Raises RoomNotFound for unknown rooms.
        """
        room = self.state.rooms.get(event.room_id)
        if room is None:
            raise RoomNotFound(event.room_id)
        message = self._build(sender_name, event)
        await self.state.history.append(event.room_id, message)
        members = room.members
        logger.info(
            "ROOM_MESSAGE room_id=%s sender=%s message_id=%s members=%d",
            event.room_id, sender_id, message.id, len(members),
        )
        return [Delivery.to_users(members, "room-message", {"roomId": event.room_id, **message.to_wire()})]

    def route_signal(self, sender_id: str, kind: str, event: SignalIn) -> List[Delivery]:
        """Relay a peer negotiation payload to one user without looking inside it."""
        try:
            self._require_online(event.to)
        except RecipientOffline as e:
            logger.debug("SIGNAL_DROPPED kind=%s sender=%s reason=%s", kind, sender_id, e)
            return []
        return [Delivery.to_users([event.to], kind, {**event.payload(), "from": sender_id})]
