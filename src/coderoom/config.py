"""
Runtime configuration for coderoom.

Values come from environment variables (``CODEROOM_*``), optionally loaded
from a ``.env`` file in the project directory. ``CONFIG`` is the single
source of truth; call ``CONFIG.reload()`` after changing the environment.
"""

import os
import tempfile
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_DIR = Path(os.getenv("CODEROOM_PROJECT_DIR", Path.cwd()))

ENV_PREFIX = "CODEROOM_"


class Config(BaseModel):
    """Server, channel and sandbox settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Rooms
    default_language: str = "java"

    # Client channel
    server_url: str = "http://localhost:3000"
    connect_timeout: float = 10.0
    reconnect_delay: float = 1.0

    # Sandbox
    sandbox_runtime: str = "docker"
    sandbox_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "coderoom"
    )
    execution_timeout: float = 5.0
    max_output_bytes: int = 1024 * 1024
    docker_memory_mb: int = 256
    docker_cpus: float = 1.0
    docker_pids_limit: int = 128
    docker_network_enabled: bool = False
    docker_run_as_host_user: bool = True
    java_image: str = "eclipse-temurin:21-jdk"
    python_image: str = "python:3.12-slim"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config from ``CODEROOM_*`` environment variables."""
        values: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            if field.annotation == list[str]:
                values[name] = [item.strip() for item in raw.split(",") if item.strip()]
            else:
                values[name] = raw
        return cls(**values)

    def reload(self) -> None:
        """Re-read the environment and update this instance in place."""
        load_dotenv(PROJECT_DIR / ".env")
        fresh = Config.from_env()
        for name in Config.model_fields:
            setattr(self, name, getattr(fresh, name))


load_dotenv(PROJECT_DIR / ".env")
CONFIG = Config.from_env()
