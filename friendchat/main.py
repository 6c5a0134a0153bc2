"""
friendchat - FastAPI Application

Main application entry point. Configures the app, CORS, the in-memory chat
state and the WebSocket event channel.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from friendchat import __version__
from friendchat.config import Settings, get_settings
from friendchat.routers import websocket
from friendchat.routers.events import ChatState, EventRouter
from friendchat.routers.websocket import ConnectionManager

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app. Each app owns a fresh, empty chat state."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        logger.info("friendchat starting...")
        yield
        logger.info(
            f"friendchat shutting down, dropping {app.state.connections.count()} connections "
            f"and {app.state.chat.identity.count()} users"
        )

    app = FastAPI(
        title="friendchat",
        description="Real-time friends, private and global chat",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.chat = ChatState.in_memory(settings)
    app.state.event_router = EventRouter(app.state.chat)
    app.state.connections = ConnectionManager(on_drop=app.state.event_router.release_handle)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(websocket.router, tags=["Chat"])

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "friendchat"}

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "version": __version__,
            "connections": app.state.connections.count(),
            "users": app.state.chat.identity.count(),
            "online_users": app.state.chat.presence.online_count(),
        }

    return app


def run():
    """Console entry point: serve on the configured host and port."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(f"Starting friendchat on port {settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
