"""FastAPI application: the /ws event channel plus a few read-only REST views."""
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .broadcaster import Broadcaster
from .config import Settings, get_settings
from .dispatch import EventDispatcher
from .lifecycle import ConnectionLifecycle, Session
from .logging_config import configure_logging
from .router import MessageRouter
from .state import ChatState
from .transport import ConnectionHub, WebSocketConnection

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_file)

    state = ChatState.from_settings(settings)
    broadcaster = Broadcaster(state)
    lifecycle = ConnectionLifecycle(state, broadcaster)
    dispatcher = EventDispatcher(state, MessageRouter(state), broadcaster)
    hub = ConnectionHub(state.registry)

    app = FastAPI(title="relaychat", version="0.1.0")
    app.state.chat = state
    app.state.hub = hub
    app.state.settings = settings

    # Allow the browser front-end to call the REST endpoints
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def index():
        return HTMLResponse('<h3>relaychat running. Connect via WebSocket at /ws?userId=ID&username=NAME</h3>')

    @app.get("/users")
    async def list_users():
        return JSONResponse([u.to_wire() for u in state.registry.list_online()])

    @app.get("/rooms")
    async def list_rooms():
        return JSONResponse([r.to_wire() for r in state.rooms.list_rooms()])

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        # identity comes from ?userId=...&username=...
        await websocket.accept()
        connection = WebSocketConnection(websocket)
        session = Session(connection)
        await hub.add(connection)
        try:
            await hub.deliver(await lifecycle.connect(session, websocket.query_params))
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                await hub.deliver(await dispatcher.handle_message(session, message))
        except WebSocketDisconnect:
            pass
        finally:
            await hub.remove(connection)
            await hub.deliver(await lifecycle.disconnect(session))
            logger.debug("CONNECTION_CLOSED session=%r live=%d", session, len(hub))

    return app


def main():
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
