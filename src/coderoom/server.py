"""
Starlette-based web server for coderoom.

This server provides:
- /ws/room: room channel (presence, code and language relay)
- /run: sandboxed code execution
- /languages: supported execution languages
- /rooms: active rooms and their members
- /health, /ready: liveness and readiness

The room relay and the sandbox orchestrator live on ``app.state`` and are
created in the lifespan handler.
"""

import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route, WebSocketRoute

from coderoom.config import CONFIG
from coderoom.logger import get_logger, setup_logging
from coderoom.rooms.relay import EventRelay
from coderoom.routes.health_routes import health_check, readiness_check
from coderoom.routes.room_routes import describe_room, list_rooms, room_websocket_endpoint
from coderoom.routes.run_routes import list_languages, run_code
from coderoom.sandbox.orchestrator import SandboxOrchestrator

if "--debug" in sys.argv:
    os.environ["LOG_LEVEL"] = "DEBUG"

log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
setup_logging(level=log_level, log_file=log_file)

logger = get_logger(__name__)


def create_app(
    relay: Optional[EventRelay] = None,
    orchestrator: Optional[SandboxOrchestrator] = None,
) -> Starlette:
    """Build the application; tests pass their own relay or orchestrator."""

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Application startup - initializing services")

        app.state.relay = relay or EventRelay()
        logger.info("Room relay initialized")

        app.state.orchestrator = orchestrator
        if app.state.orchestrator is None:
            try:
                app.state.orchestrator = SandboxOrchestrator()
            except Exception as e:
                logger.error(f"Failed to initialize sandbox: {e}")

        if app.state.orchestrator:
            logger.info(
                f"Sandbox ready: runtime={app.state.orchestrator.runtime.name}, "
                f"root={app.state.orchestrator.sandbox_root}, "
                f"timeout={app.state.orchestrator.timeout:g}s"
            )

        yield

        logger.info("Application shutdown - cleaning up services")
        await app.state.relay.close_all()

    return Starlette(
        debug=log_level.upper() == "DEBUG",
        routes=[
            WebSocketRoute("/ws/room", room_websocket_endpoint),
            Route("/run", run_code, methods=["POST"]),
            Route("/languages", list_languages, methods=["GET"]),
            Route("/rooms", list_rooms, methods=["GET"]),
            Route("/rooms/{session_id}", describe_room, methods=["GET"]),
            Route("/health", health_check, methods=["GET"]),
            Route("/ready", readiness_check, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=CONFIG.cors_origins,
                allow_methods=["GET", "POST"],
                allow_headers=["*"],
            )
        ],
        lifespan=lifespan,
    )


app = create_app()


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    host = host or CONFIG.host
    port = port or CONFIG.port
    logger.info(f"Starting coderoom server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    run()
