"""
Local subprocess runtime for sandbox execution.

Runs build and run steps directly on the host with the working directory as
cwd and a minimal environment. Intended for development and tests; it does
not confine filesystem access the way the Docker runtime does.
"""

import os
import shutil
import sys
from pathlib import Path

from coderoom.sandbox.languages import Language, LanguageSpec
from coderoom.sandbox.runtimes.base import RuntimePlan, RuntimeStep


class LocalSandboxRuntime:
    """Executes code via local subprocesses."""

    name = "local"

    def _env(self, spec: LanguageSpec, workdir: Path) -> dict[str, str]:
        env = {
            "PATH": os.environ.get("PATH", ""),
            "HOME": str(workdir),
            "TMPDIR": str(workdir),
        }
        if "JAVA_HOME" in os.environ:
            env["JAVA_HOME"] = os.environ["JAVA_HOME"]
        env.update(spec.env)
        return env

    def _argv(self, spec: LanguageSpec, argv: list[str]) -> list[str]:
        # Use the current interpreter rather than whatever "python" is on PATH
        if spec.language == Language.PYTHON and argv and argv[0] == "python":
            return [sys.executable, *argv[1:]]
        return list(argv)

    def plan(self, spec: LanguageSpec, workdir: Path, run_id: str) -> RuntimePlan:
        env = self._env(spec, workdir)
        steps: list[RuntimeStep] = []
        if spec.build:
            steps.append(
                RuntimeStep(
                    argv=self._argv(spec, spec.build),
                    cwd=workdir,
                    env=env,
                    feeds_stdin=False,
                    label="build",
                )
            )
        steps.append(RuntimeStep(argv=self._argv(spec, spec.run), cwd=workdir, env=env))
        return RuntimePlan(run_id=run_id, steps=steps)

    async def terminate(self, run_id: str) -> None:
        # Nothing outlives the killed process group
        return None

    async def check_health(self) -> tuple[bool, str]:
        missing = [tool for tool in ("javac", "java") if shutil.which(tool) is None]
        if missing:
            return True, f"local runtime ready (missing: {', '.join(missing)})"
        return True, "local runtime ready"
