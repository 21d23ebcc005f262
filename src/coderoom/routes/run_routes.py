"""
Routes for sandboxed code execution.

POST /run runs independently of room channels: it takes the code, language
and stdin in the request body and answers once the sandbox is done.
"""

from pydantic import ValidationError as PydanticValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from coderoom.config import CONFIG
from coderoom.errors import SandboxSetupError, UnsupportedLanguageError, ValidationError
from coderoom.logger import get_logger
from coderoom.sandbox.languages import supported_languages
from coderoom.sandbox.models import ExecutionStatus, RunRequest, RunResponse

logger = get_logger(__name__)


def _get_orchestrator(request: Request):
    """Get SandboxOrchestrator from app state."""
    return getattr(request.app.state, "orchestrator", None)


async def run_code(request: Request) -> JSONResponse:
    """
    POST /run — Execute code in a sandbox.

    Body: {"code": "print('hi')", "language": "python", "input": ""}
    """
    orchestrator = _get_orchestrator(request)
    if not orchestrator:
        return JSONResponse({"error": "Sandbox not initialized"}, status_code=503)

    try:
        body = await request.json()
        run_req = RunRequest(**body)
    except PydanticValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    snippet = (run_req.code or "")[:50]
    logger.info(f"Run request: language={run_req.language}, code={snippet!r}...")

    try:
        result = await orchestrator.execute(
            run_req.code, run_req.language, run_req.stdin or ""
        )
    except UnsupportedLanguageError as e:
        return JSONResponse(
            {"error": "Unsupported language", "detail": str(e)}, status_code=400
        )
    except ValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except SandboxSetupError as e:
        logger.error(f"Error during code execution: {e}")
        return JSONResponse(
            {
                "error": "Server error during execution",
                "status": ExecutionStatus.SETUP_ERROR.value,
            },
            status_code=500,
        )

    resp = RunResponse(
        output=result.output,
        status=result.status,
        run_id=result.run_id,
        duration_ms=result.duration_ms,
    )
    return JSONResponse(resp.model_dump(by_alias=True, mode="json"))


async def list_languages(request: Request) -> JSONResponse:
    """GET /languages — Supported execution languages."""
    return JSONResponse(
        {
            "languages": supported_languages(),
            "default": CONFIG.default_language,
        }
    )
