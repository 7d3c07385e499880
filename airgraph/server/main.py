"""
FastAPI + Socket.IO service for the airflow network editor.

Start with:
    python -m airgraph.server.main

Or via uvicorn directly:
    uvicorn airgraph.server.main:socket_app --port 3001 --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from airgraph.core.FlowNetwork import FlowNetwork
from airgraph.server.config import Settings, configure_logging
from airgraph.server.routes.graph_routes import router
from airgraph.server.state import EditorState
from airgraph.server.trace.socket_server import create_socket_app

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------


def create_app(network: Optional[FlowNetwork] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build an app that owns one editor session."""
    settings = settings if settings is not None else Settings()

    app = FastAPI(title="AirGraph API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    editor = EditorState(network)
    if settings.seed_demo and not editor.network.nodes:
        editor.seed_demo()

    app.state.editor = editor
    app.state.settings = settings

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "revision": editor.network.revision}

    return app


def create_asgi_app(settings: Optional[Settings] = None):
    """FastAPI app wrapped in the Socket.IO ASGI layer."""
    settings = settings if settings is not None else Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings=settings)
    return create_socket_app(app, app.state.editor, settings.cors_origins)


# ---------------------------------------------------------------------------
# Wrap with Socket.IO ASGI layer
# ---------------------------------------------------------------------------

# socket_app is the top-level ASGI app passed to uvicorn.
# Socket.IO connections are handled at the root; all other requests are
# forwarded to the inner FastAPI app.
socket_app = create_asgi_app()

# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    _settings = Settings.from_env()
    logger.info("Starting AirGraph on %s:%d", _settings.host, _settings.port)
    uvicorn.run(
        "airgraph.server.main:socket_app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.reload,
        log_level=_settings.log_level.lower(),
    )
