"""Unit tests for message routing."""
import unittest
from unittest.mock import patch

from relaychat.errors import RoomNotFound
from relaychat.models import PrivateMessageIn, RoomMessageIn, SignalIn
from relaychat.router import MessageRouter
from relaychat.state import ChatState


class TestMessageRouter(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.state = ChatState()
        self.router = MessageRouter(self.state)
        self.alice, self.bob = object(), object()
        await self.state.registry.register(self.alice, "a", "Alice")
        await self.state.registry.register(self.bob, "b", "Bob")

    async def test_direct_message_to_recipient_only(self):
        event = PrivateMessageIn.model_validate({"to": "b", "message": "hey"})
        deliveries = self.router.route_direct("a", event)
        self.assertEqual(len(deliveries), 1)
        delivery = deliveries[0]
        self.assertEqual(delivery.event, "private-message")
        self.assertEqual(delivery.user_ids, ("b",))
        self.assertEqual(delivery.data["from"], "a")
        self.assertEqual(delivery.data["message"], "hey")
        self.assertIn("id", delivery.data)
        self.assertIn("timestamp", delivery.data)

    async def test_direct_message_carries_file_fields(self):
        event = PrivateMessageIn.model_validate({
            "to": "b", "message": "photo.png", "isFile": True, "isEncrypted": True, "fileContent": "data:...",
        })
        data = self.router.route_direct("a", event)[0].data
        self.assertTrue(data["isFile"])
        self.assertTrue(data["isEncrypted"])
        self.assertEqual(data["fileContent"], "data:...")

    async def test_direct_message_to_offline_user_is_dropped(self):
        room = await self.state.rooms.create_room("general", "a")
        event = PrivateMessageIn.model_validate({"to": "c", "message": "hello?"})
        self.assertEqual(self.router.route_direct("a", event), [])
        self.assertEqual(self.state.history.history_of(room.id), [])
        self.assertEqual(self.state.history.all_histories(), [])

    async def test_room_message_recorded_and_fanned_out(self):
        room = await self.state.rooms.create_room("general", "a")
        await self.state.rooms.join_room(room.id, "b")
        event = RoomMessageIn.model_validate({"roomId": room.id, "message": "hi"})
        deliveries = await self.router.route_room("a", "Alice", event)

        self.assertEqual(len(deliveries), 1)
        self.assertEqual(deliveries[0].event, "room-message")
        self.assertEqual(set(deliveries[0].user_ids), {"a", "b"})
        self.assertEqual(deliveries[0].data["roomId"], room.id)
        self.assertEqual(deliveries[0].data["from"], "Alice")

        history = self.state.history.history_of(room.id)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].sender, "Alice")
        self.assertEqual(history[0].message, "hi")
        self.assertEqual(history[0].id, deliveries[0].data["id"])

    async def test_room_message_to_unknown_room(self):
        event = RoomMessageIn.model_validate({"roomId": "missing", "message": "hi"})
        with self.assertRaises(RoomNotFound):
            await self.router.route_room("a", "Alice", event)
        self.assertEqual(self.state.history.history_of("missing"), [])

    async def test_room_history_order_and_timestamps(self):
        room = await self.state.rooms.create_room("general", "a")
        for n in range(20):
            event = RoomMessageIn.model_validate({"roomId": room.id, "message": str(n)})
            await self.router.route_room("a", "Alice", event)
        history = self.state.history.history_of(room.id)
        self.assertEqual([m.message for m in history], [str(n) for n in range(20)])
        stamps = [m.timestamp for m in history]
        self.assertEqual(stamps, sorted(stamps))

    async def test_timestamps_do_not_go_backwards_with_clock(self):
        room = await self.state.rooms.create_room("general", "a")
        with patch("relaychat.router.now_ms", side_effect=[5000, 4000, 6000]):
            for text in ("one", "two", "three"):
                event = RoomMessageIn.model_validate({"roomId": room.id, "message": text})
                await self.router.route_room("a", "Alice", event)
        self.assertEqual([m.timestamp for m in self.state.history.history_of(room.id)], [5000, 5000, 6000])

    async def test_signal_relayed_opaquely(self):
        event = SignalIn.model_validate({"to": "b", "offer": {"sdp": "v=0", "type": "offer"}})
        deliveries = self.router.route_signal("a", "offer", event)
        self.assertEqual(len(deliveries), 1)
        self.assertEqual(deliveries[0].event, "offer")
        self.assertEqual(deliveries[0].user_ids, ("b",))
        self.assertEqual(deliveries[0].data, {"offer": {"sdp": "v=0", "type": "offer"}, "from": "a"})

    async def test_signal_to_offline_user_is_dropped(self):
        event = SignalIn.model_validate({"to": "z", "answer": "x"})
        self.assertEqual(self.router.route_signal("a", "answer", event), [])


if __name__ == '__main__':
    unittest.main()
