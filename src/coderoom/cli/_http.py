"""
Shared HTTP helpers for CLI commands that talk to the running server.
"""

import os
from typing import Any, Optional

import typer

from coderoom.config import CONFIG


def get_server_url() -> str:
    """Server base URL: ``CODEROOM_SERVER_URL`` wins over the loaded config."""
    return os.getenv("CODEROOM_SERVER_URL", CONFIG.server_url).rstrip("/")


def _fail(message: str) -> typer.Exit:
    typer.echo(f"❌ {message}")
    return typer.Exit(code=1)


def _request(
    method: str,
    path: str,
    json: Optional[dict[str, Any]] = None,
    timeout: float = 10.0,
) -> dict:
    import httpx

    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.request(method, url, json=json, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        raise _fail(f"Cannot reach coderoom server at {get_server_url()}. Is it running?")
    except httpx.TimeoutException:
        raise _fail(f"{method} {path} timed out after {timeout:g}s")
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("error", e.response.text)
        except Exception:
            detail = f"HTTP {e.response.status_code}"
        raise _fail(f"Server error: {detail}")
    except Exception as e:
        raise _fail(f"Error: {e}")


def _http_get(path: str) -> dict:
    """GET ``path`` from the running server and return the JSON body."""
    return _request("GET", path)


def _http_post(path: str, data: dict = None, timeout: float = 30.0) -> dict:
    """POST ``data`` as JSON to the running server and return the JSON body."""
    return _request("POST", path, json=data or {}, timeout=timeout)
