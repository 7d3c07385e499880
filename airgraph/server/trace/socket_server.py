"""
Socket.IO server: pushes every evaluation event to connected editors.

Uses python-socketio in ASGI mode so it can wrap FastAPI.
`create_socket_app(fastapi_app, editor)` returns the composite ASGI
application to pass to uvicorn.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

import socketio

from airgraph.server.state import EditorState

logger = logging.getLogger(__name__)

EVENT_NAME = "evaluation"


def create_socket_server(editor: EditorState, cors_origins: Any = "*") -> socketio.AsyncServer:
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_origins,
        logger=False,
        engineio_logger=False,
    )

    # ------------------------------------------------------------------
    # Fan-out: wire the editor's emitter → Socket.IO emit
    # ------------------------------------------------------------------

    def _on_event(event: Dict[str, Any]) -> None:
        """
        Called synchronously by EvaluationEmitter.fire().
        We schedule an async emit on the running event loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, %s not pushed", event.get("type"))
            return
        loop.create_task(sio.emit(EVENT_NAME, event))

    editor.emitter.on_event(_on_event)

    # ------------------------------------------------------------------
    # Socket.IO lifecycle events
    # ------------------------------------------------------------------

    @sio.event
    async def connect(sid: str, environ: dict) -> None:
        # New editors get the current state right away.
        logger.info("Editor connected: %s", sid)
        await sio.emit(EVENT_NAME, editor.evaluation_event(), to=sid)

    @sio.event
    async def disconnect(sid: str) -> None:
        logger.info("Editor disconnected: %s", sid)

    return sio


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_socket_app(fastapi_app: Any, editor: EditorState, cors_origins: List[str] = None) -> socketio.ASGIApp:
    """Wrap *fastapi_app* inside a Socket.IO ASGI application."""
    origins = cors_origins if cors_origins and cors_origins != ["*"] else "*"
    sio = create_socket_server(editor, origins)
    fastapi_app.state.sio = sio
    return socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
