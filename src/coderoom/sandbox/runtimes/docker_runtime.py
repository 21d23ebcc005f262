"""
Docker runtime for sandbox execution.

The working directory is the only host path mounted into the container.
Build and run steps are chained inside the container with ``sh -c`` over a
string assembled from the language spec alone; user code and stdin only ever
reach the container through the mounted file and the stdin pipe.
"""

import asyncio
import os
import shlex
from pathlib import Path
from typing import Optional

from coderoom.config import CONFIG
from coderoom.logger import get_logger
from coderoom.sandbox.languages import LanguageSpec
from coderoom.sandbox.runtimes.base import RuntimePlan, RuntimeStep

logger = get_logger(__name__)

CONTAINER_WORKDIR = "/app"
CONTAINER_PREFIX = "coderoom-"


class DockerSandboxRuntime:
    """Executes code inside a throwaway Docker container."""

    name = "docker"

    def __init__(
        self,
        memory_limit_mb: Optional[int] = None,
        cpus: Optional[float] = None,
        pids_limit: Optional[int] = None,
        network_enabled: Optional[bool] = None,
        user: Optional[str] = None,
        images: Optional[dict[str, str]] = None,
        extra_args: Optional[list[str]] = None,
    ):
        self.memory_limit_mb = (
            CONFIG.docker_memory_mb if memory_limit_mb is None else memory_limit_mb
        )
        self.cpus = CONFIG.docker_cpus if cpus is None else cpus
        self.pids_limit = CONFIG.docker_pids_limit if pids_limit is None else pids_limit
        self.network_enabled = (
            CONFIG.docker_network_enabled if network_enabled is None else network_enabled
        )
        self.images = images or {}
        self.user = self.default_user() if user is None else user
        self.extra_args = extra_args or []

    @staticmethod
    def default_user() -> str:
        """Host uid:gid on POSIX so files written to the mount stay removable."""
        if not CONFIG.docker_run_as_host_user or not hasattr(os, "getuid"):
            return ""
        return f"{os.getuid()}:{os.getgid()}"

    def image_for(self, spec: LanguageSpec) -> str:
        if spec.language.value in self.images:
            return self.images[spec.language.value]
        return getattr(CONFIG, spec.image_setting)

    @staticmethod
    def container_name(run_id: str) -> str:
        return f"{CONTAINER_PREFIX}{run_id}"

    def plan(self, spec: LanguageSpec, workdir: Path, run_id: str) -> RuntimePlan:
        cmd: list[str] = [
            "docker",
            "run",
            "--rm",
            "-i",
            "--name",
            self.container_name(run_id),
            "--workdir",
            CONTAINER_WORKDIR,
            "--volume",
            f"{self.normalize_workdir(workdir)}:{CONTAINER_WORKDIR}:rw",
        ]

        if self.user:
            cmd.extend(["--user", self.user])

        for key, value in sorted(spec.env.items()):
            cmd.extend(["--env", f"{key}={value}"])

        if not self.network_enabled:
            cmd.extend(["--network", "none"])
        if self.memory_limit_mb > 0:
            cmd.extend(["--memory", f"{self.memory_limit_mb}m"])
        if self.cpus and self.cpus > 0:
            cmd.extend(["--cpus", f"{self.cpus}"])
        if self.pids_limit > 0:
            cmd.extend(["--pids-limit", str(self.pids_limit)])

        cmd.extend(self.extra_args)
        cmd.append(self.image_for(spec))

        if spec.build:
            chained = f"{shlex.join(spec.build)} && {shlex.join(spec.run)}"
            cmd.extend(["sh", "-c", chained])
        else:
            cmd.extend(spec.run)

        return RuntimePlan(run_id=run_id, steps=[RuntimeStep(argv=cmd)])

    async def terminate(self, run_id: str) -> None:
        """Force-remove the container; killing the docker CLI alone leaves it running."""
        name = self.container_name(run_id)
        try:
            proc = await asyncio.create_subprocess_exec(
                "docker",
                "rm",
                "-f",
                name,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await asyncio.wait_for(proc.wait(), timeout=10.0)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Failed to remove container {name}: {e}")

    async def check_health(self, timeout_seconds: float = 2.5) -> tuple[bool, str]:
        """Return (healthy, detail) for docker runtime availability."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "docker",
                "info",
                "--format",
                "{{.ServerVersion}}",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return False, "docker CLI not found"

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=timeout_seconds
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return False, "docker check timed out"

        if proc.returncode != 0:
            detail = (stderr or stdout).decode(errors="replace").strip()
            return False, detail or "docker daemon unavailable"

        version = stdout.decode(errors="replace").strip() or "unknown"
        return True, f"docker daemon ready (server {version})"

    @staticmethod
    def normalize_workdir(workdir: Path) -> str:
        """Normalize host path for Docker mount commands."""
        return str(workdir.resolve())
