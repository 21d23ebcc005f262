"""
Health check and readiness endpoints.

/health answers as long as the process is up. /ready also probes the room
relay and the sandbox runtime (e.g. whether the Docker daemon answers).
"""

import time
from datetime import datetime

from starlette.requests import Request
from starlette.responses import JSONResponse

from coderoom.logger import get_logger

logger = get_logger(__name__)
start_time = time.time()


async def health_check(request: Request) -> JSONResponse:
    """Liveness probe; always 200 while the server runs."""
    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "uptime_seconds": int(time.time() - start_time),
        }
    )


def _check_rooms(app) -> str:
    return "ok" if getattr(app.state, "relay", None) else "not initialized"


async def _check_sandbox(app) -> str:
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is None:
        return "not initialized"
    try:
        healthy, detail = await orchestrator.runtime.check_health()
    except Exception as e:
        logger.error(f"Sandbox health probe failed: {e}")
        return f"error: {e}"
    return "ok" if healthy else f"error: {detail}"


async def readiness_check(request: Request) -> JSONResponse:
    """
    Readiness probe.

    Returns 200 when the relay exists and the sandbox runtime reports healthy,
    503 otherwise. ``connections`` counts participants currently in a room.
    """
    app = request.app
    checks = {
        "rooms": _check_rooms(app),
        "sandbox": await _check_sandbox(app),
    }

    ready = all(value == "ok" for value in checks.values())
    if not ready:
        logger.warning(f"Not ready: {checks}")

    relay = getattr(app.state, "relay", None)
    return JSONResponse(
        {
            "status": "ready" if ready else "not ready",
            "checks": checks,
            "connections": relay.directory.connected_count if relay else 0,
            "timestamp": datetime.now().isoformat(),
        },
        status_code=200 if ready else 503,
    )
