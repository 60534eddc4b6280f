"""In-memory stand-ins for transport connections."""
from relaychat.broadcaster import Broadcaster
from relaychat.dispatch import EventDispatcher
from relaychat.lifecycle import ConnectionLifecycle, Session
from relaychat.router import MessageRouter
from relaychat.state import ChatState
from relaychat.transport import ConnectionHub


class FakeConnection:
    """Records every frame sent to it."""

    def __init__(self, name="conn"):
        self.name = name
        self.frames = []
        self.fail = False

    async def send_frame(self, frame):
        if self.fail:
            raise ConnectionResetError("peer gone")
        self.frames.append(frame)

    def of_type(self, event):
        return [f for f in self.frames if f["type"] == event]

    def types(self):
        return [f["type"] for f in self.frames]

    def clear(self):
        self.frames.clear()

    def __repr__(self):
        return f"<FakeConnection {self.name}>"


class Server:
    """The relay components wired together around fake connections."""

    def __init__(self, state=None):
        self.state = state or ChatState()
        self.broadcaster = Broadcaster(self.state)
        self.lifecycle = ConnectionLifecycle(self.state, self.broadcaster)
        self.dispatcher = EventDispatcher(self.state, MessageRouter(self.state), self.broadcaster)
        self.hub = ConnectionHub(self.state.registry)

    async def connect(self, user_id=None, username=None):
        connection = FakeConnection(user_id or "anonymous")
        session = Session(connection)
        await self.hub.add(connection)
        query = {}
        if user_id:
            query["userId"] = user_id
        if username:
            query["username"] = username
        await self.hub.deliver(await self.lifecycle.connect(session, query))
        return session

    async def send(self, session, frame):
        await self.hub.deliver(await self.dispatcher.dispatch(session, frame))

    async def disconnect(self, session):
        await self.hub.remove(session.connection)
        await self.hub.deliver(await self.lifecycle.disconnect(session))
