"""
Runtime registry: maps runtime names to backend factories.
"""

from typing import Callable, Optional

from coderoom.config import CONFIG
from coderoom.errors import SandboxSetupError
from coderoom.sandbox.runtimes.base import SandboxRuntime
from coderoom.sandbox.runtimes.docker_runtime import DockerSandboxRuntime
from coderoom.sandbox.runtimes.local_runtime import LocalSandboxRuntime

RUNTIME_FACTORIES: dict[str, Callable[[], SandboxRuntime]] = {
    "docker": DockerSandboxRuntime,
    "local": LocalSandboxRuntime,
}


def available_runtimes() -> list[str]:
    return sorted(RUNTIME_FACTORIES)


def create_runtime(name: Optional[str] = None) -> SandboxRuntime:
    """Instantiate a runtime by name (defaults to ``CONFIG.sandbox_runtime``)."""
    runtime_name = (name or CONFIG.sandbox_runtime).strip().lower()
    factory = RUNTIME_FACTORIES.get(runtime_name)
    if factory is None:
        raise SandboxSetupError(
            f"Unknown sandbox runtime '{runtime_name}'. "
            f"Available: {', '.join(available_runtimes())}"
        )
    return factory()
