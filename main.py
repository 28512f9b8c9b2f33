import logging

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT
from lifecycle import LifecycleCoordinator

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def create_app(coordinator: LifecycleCoordinator | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.coordinator = coordinator if coordinator is not None else LifecycleCoordinator()
        yield
        logger.info("shutting down with %d participant(s) connected", len(app.state.coordinator.registry))
        app.state.coordinator.registry.close_all()

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST"],
    )

    @app.websocket("/ws")
    async def ws_endpoint(websocket: WebSocket):
        signaling: LifecycleCoordinator = websocket.app.state.coordinator
        await websocket.accept()
        participant_id = signaling.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                if message.get("text") is None:
                    logger.warning("participant=%s sent a binary frame, ignored", participant_id)
                    continue
                signaling.dispatch(participant_id, message["text"])
        except WebSocketDisconnect:
            pass
        finally:
            signaling.disconnect(participant_id)

    @app.get("/rooms")
    async def list_rooms(request: Request):
        return {"rooms": request.app.state.coordinator.table.snapshot()}

    @app.get("/rooms/{room_id}")
    async def room_status(room_id: str, request: Request):
        table = request.app.state.coordinator.table
        size = table.size_of(room_id)
        return {"roomId": room_id, "size": size, "isRoomFull": size >= table.capacity}

    @app.get("/health")
    async def health(request: Request):
        signaling = request.app.state.coordinator
        return {"status": "ok", "participants": len(signaling.registry), "rooms": len(signaling.table)}

    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Server running on port %d", PORT)
    uvicorn.run(app, host=HOST, port=PORT)
