"""
Sandbox execution orchestrator.

Turns one execution request into one isolated, time-bounded run:

    validate -> allocate <sandbox_root>/<uuid> -> write entry file
    -> launch runtime steps (shared wall-clock budget) -> capture output
    -> remove the working directory

Run failures (non-zero exit, build failure, timeout, runaway output) come
back as an ``ExecutionResult``; only validation and setup problems raise.
However a step ends, cancellation of the caller included, its process group
is gone before ``execute()`` returns or re-raises.
"""

import asyncio
import os
import shutil
import signal
import time
import uuid
from pathlib import Path
from typing import Optional, Union

from coderoom.config import CONFIG
from coderoom.errors import SandboxSetupError, ValidationError
from coderoom.logger import get_logger
from coderoom.sandbox.languages import LanguageSpec, resolve_language
from coderoom.sandbox.models import ExecutionRequest, ExecutionResult, ExecutionStatus
from coderoom.sandbox.runtimes.base import RuntimeStep, SandboxRuntime
from coderoom.sandbox.runtimes.registry import create_runtime

logger = get_logger(__name__)

TIMEOUT_MESSAGE = (
    "Execution timed out ({limit}s limit). "
    "Possible infinite loop or long-running computation."
)
OUTPUT_LIMIT_MESSAGE = "Output limit exceeded ({limit} bytes). Process terminated."

READ_CHUNK = 64 * 1024


class OutputLimitExceeded(Exception):
    """A step wrote more than the allowed number of bytes to one stream."""


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _require_utf8(text: str, what: str) -> None:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError(f"{what} must be valid UTF-8 text") from e


class SandboxOrchestrator:
    """
    Runs untrusted source in a fresh working directory per request.

    Instances hold no per-request state, so one orchestrator serves any number
    of concurrent ``execute()`` calls.

    Args:
        runtime: Backend that turns a prepared directory into argument vectors.
            Defaults to ``CONFIG.sandbox_runtime``.
        sandbox_root: Parent directory for working directories.
        timeout: Wall-clock budget in seconds, shared by build and run steps.
        max_output_bytes: Cap applied separately to stdout and stderr.
    """

    def __init__(
        self,
        runtime: Optional[SandboxRuntime] = None,
        sandbox_root: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
        max_output_bytes: Optional[int] = None,
    ):
        self.runtime = runtime or create_runtime()
        self.sandbox_root = Path(sandbox_root or CONFIG.sandbox_root)
        self.timeout = CONFIG.execution_timeout if timeout is None else timeout
        self.max_output_bytes = (
            CONFIG.max_output_bytes if max_output_bytes is None else max_output_bytes
        )

    def validate(
        self,
        code: Optional[str],
        language: Optional[str],
        stdin: Optional[str] = "",
    ) -> ExecutionRequest:
        """
        Check a request before anything is allocated.

        Raises:
            ValidationError: Missing code or language, or text that cannot be
                written as UTF-8.
            UnsupportedLanguageError: Language outside the supported set.
        """
        if not code:
            raise ValidationError("Code is required")
        spec = resolve_language(language)
        _require_utf8(code, "Code")
        _require_utf8(stdin or "", "Input")
        return ExecutionRequest(code=code, language=spec.language, stdin=stdin or "")

    async def execute(
        self,
        code: Optional[str],
        language: Optional[str],
        stdin: Optional[str] = "",
    ) -> ExecutionResult:
        """
        Run ``code`` as ``language`` with ``stdin`` fed upfront.

        Raises:
            ValidationError: Invalid request, nothing allocated.
            SandboxSetupError: Working directory or process could not be set up.
        """
        request = self.validate(code, language, stdin)
        spec = resolve_language(request.language.value)

        run_id = uuid.uuid4().hex
        workdir = self.sandbox_root / run_id
        started = time.monotonic()
        logger.info(f"Run {run_id}: {spec.language.value} via {self.runtime.name}")

        try:
            self._prepare(workdir, spec, request.code)
            plan = self.runtime.plan(spec, workdir, run_id)
            status, output = await self._run_plan(plan.steps, run_id, request.stdin)
        finally:
            self._cleanup(workdir)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"Run {run_id} finished: {status.value} in {duration_ms}ms")
        return ExecutionResult(
            output=output, status=status, run_id=run_id, duration_ms=duration_ms
        )

    def _prepare(self, workdir: Path, spec: LanguageSpec, code: str) -> None:
        try:
            workdir.mkdir(parents=True, exist_ok=False)
            (workdir / spec.entry_file).write_text(code, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            logger.error(f"Failed to prepare sandbox {workdir}: {e}")
            raise SandboxSetupError(f"Failed to prepare sandbox: {e}") from e

    async def _spawn(self, step: RuntimeStep) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *step.argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(step.cwd) if step.cwd else None,
                env=step.env,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            logger.error(f"Failed to launch '{step.argv[0]}': {e}")
            raise SandboxSetupError(f"Failed to launch sandbox: {e}") from e

    async def _read_capped(self, stream: asyncio.StreamReader) -> bytes:
        data = bytearray()
        while True:
            chunk = await stream.read(READ_CHUNK)
            if not chunk:
                return bytes(data)
            data.extend(chunk)
            if len(data) > self.max_output_bytes:
                raise OutputLimitExceeded(len(data))

    async def _feed(self, proc: asyncio.subprocess.Process, payload: bytes) -> None:
        try:
            if payload:
                proc.stdin.write(payload)
                await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Exited without reading its input
            pass
        finally:
            proc.stdin.close()

    async def _communicate(
        self, proc: asyncio.subprocess.Process, payload: bytes
    ) -> tuple[bytes, bytes]:
        """``proc.communicate`` with a byte cap on each output stream."""
        tasks = [
            asyncio.ensure_future(self._feed(proc, payload)),
            asyncio.ensure_future(self._read_capped(proc.stdout)),
            asyncio.ensure_future(self._read_capped(proc.stderr)),
        ]
        try:
            _, stdout, stderr = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        await proc.wait()
        return stdout, stderr

    async def _run_plan(
        self, steps: list[RuntimeStep], run_id: str, stdin: str
    ) -> tuple[ExecutionStatus, str]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        # Same bytes `echo "<input>" |` would pipe in
        payload = f"{stdin}\n".encode("utf-8")
        stdout = b""

        for step in steps:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return self._timed_out(run_id)

            proc = await self._spawn(step)
            try:
                stdout, stderr = await asyncio.wait_for(
                    self._communicate(proc, payload if step.feeds_stdin else b""),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                await self._kill(proc, run_id)
                return self._timed_out(run_id)
            except OutputLimitExceeded:
                await self._kill(proc, run_id)
                logger.warning(
                    f"Run {run_id} {step.label} step exceeded "
                    f"{self.max_output_bytes} bytes of output"
                )
                return (
                    ExecutionStatus.RUNTIME_ERROR,
                    OUTPUT_LIMIT_MESSAGE.format(limit=self.max_output_bytes),
                )
            except BaseException:
                # Cancelled or failed mid-step: the process group must not outlive us
                if proc.returncode is None:
                    logger.warning(f"Run {run_id} interrupted; killing process group")
                    await self._kill(proc, run_id)
                raise

            if proc.returncode != 0:
                diagnostic = _decode(stderr) or _decode(stdout)
                if not diagnostic:
                    diagnostic = f"Process exited with code {proc.returncode}"
                logger.debug(
                    f"Run {run_id} {step.label} step exited {proc.returncode}"
                )
                return ExecutionStatus.RUNTIME_ERROR, diagnostic

        return ExecutionStatus.SUCCESS, _decode(stdout)

    def _timed_out(self, run_id: str) -> tuple[ExecutionStatus, str]:
        logger.warning(f"Run {run_id} exceeded {self.timeout:g}s budget")
        return ExecutionStatus.TIMEOUT, TIMEOUT_MESSAGE.format(limit=f"{self.timeout:g}")

    async def _kill(self, proc: asyncio.subprocess.Process, run_id: str) -> None:
        """Kill the whole process group, then let the runtime release leftovers."""
        try:
            if os.name == "posix":
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        await self.runtime.terminate(run_id)

    def _cleanup(self, workdir: Path) -> None:
        try:
            shutil.rmtree(workdir)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove sandbox directory {workdir}: {e}")
