"""Presence and room-state notifications."""
from typing import List, Optional

from .models import Delivery, now_ms
from .state import ChatState


class Broadcaster:
    def __init__(self, state: ChatState):
        self.state = state

    def user_list(self, exclude=None) -> Delivery:
        users = [u.to_wire() for u in self.state.registry.list_online()]
        return Delivery.to_everyone("user-list", {"users": users}, exclude=exclude)

    def user_list_for(self, connection, user_id: str) -> Delivery:
        """Online users as seen by ``user_id``: everyone but themselves."""
        users = [u.to_wire() for u in self.state.registry.list_online() if u.id != user_id]
        return Delivery.to_connection(connection, "user-list", {"users": users})

    def room_list(self, connection=None) -> Delivery:
        data = {"rooms": [r.to_wire() for r in self.state.rooms.list_rooms()]}
        if connection is not None:
            return Delivery.to_connection(connection, "room-list", data)
        return Delivery.to_everyone("room-list", data)

    def room_joined(self, room_id: str, username: str) -> Delivery:
        members = self.state.rooms.members_of(room_id)
        return Delivery.to_users(
            members, "user-joined-room", {"roomId": room_id, "username": username, "timestamp": now_ms()}
        )

    def room_left(self, room_id: str, username: str) -> Delivery:
        members = self.state.rooms.members_of(room_id)
        return Delivery.to_users(members, "user-left-room", {"roomId": room_id, "username": username})

    def history(self, connection, room_id: str, messages: Optional[List] = None) -> Delivery:
        if messages is None:
            messages = self.state.history.history_of(room_id)
        return Delivery.to_connection(
            connection, "group-message-history",
            {"roomId": room_id, "messages": [m.to_wire() for m in messages]},
        )
