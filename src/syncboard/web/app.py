"""FastAPI app factory with the Socket.IO sync channel mounted beside it."""

from __future__ import annotations

from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import WebConfig
from .db.database import get_db
from .realtime import SyncServer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifespan: init DB, seed demo data, configure auth."""
    config: WebConfig = app.state.config

    from .db.database import close_db, init_db

    await init_db(config.db_path)

    if config.seed:
        from .db.seed import seed_db

        await seed_db(await get_db())

    from .auth.service import init_auth

    init_auth(config)

    yield

    await close_db()


def create_sync_server(config: WebConfig) -> SyncServer:
    from .chat.service import SqliteMessageStore

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=config.cors_origins or "*",
        logger=config.debug,
        engineio_logger=config.debug,
    )
    return SyncServer(SqliteMessageStore(get_db), sio=sio)


def create_app(config: WebConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or WebConfig.load()

    app = FastAPI(
        title="syncboard",
        description="Real-time collaborative kanban board",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.sync = create_sync_server(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .boards.router import router as boards_router
    from .chat.router import router as chat_router

    app.include_router(boards_router)
    app.include_router(chat_router)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health():
        registry = app.state.sync.registry
        return {"status": "ok", "active_boards": registry.board_count}

    return app


def create_asgi_app(config: WebConfig | None = None) -> socketio.ASGIApp:
    """REST and Socket.IO on one ASGI app; non-socket traffic goes to FastAPI."""
    config = config or WebConfig.load()
    app = create_app(config)
    return socketio.ASGIApp(
        app.state.sync.sio, other_asgi_app=app, socketio_path=config.socketio_path
    )
