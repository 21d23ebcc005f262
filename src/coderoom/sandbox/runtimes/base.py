"""
Base types for sandbox execution runtimes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from coderoom.sandbox.languages import LanguageSpec


@dataclass(slots=True)
class RuntimeStep:
    """One process launch: an argument vector plus its environment."""

    argv: list[str]
    cwd: Optional[Path] = None
    env: Optional[dict[str, str]] = None
    feeds_stdin: bool = True
    label: str = "run"


@dataclass(slots=True)
class RuntimePlan:
    """Ordered steps for one execution; all steps share one time budget."""

    run_id: str
    steps: list[RuntimeStep] = field(default_factory=list)


class SandboxRuntime(Protocol):
    """Runtime contract for sandbox execution backends."""

    name: str

    def plan(self, spec: LanguageSpec, workdir: Path, run_id: str) -> RuntimePlan:
        """Build the argument vectors for a prepared working directory."""

    async def terminate(self, run_id: str) -> None:
        """Release anything that outlives the killed process (e.g. a container)."""

    async def check_health(self) -> tuple[bool, str]:
        """Return (healthy, detail) for this backend."""
