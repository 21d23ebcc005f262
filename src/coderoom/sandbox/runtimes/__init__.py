"""Sandbox runtime backends."""

from coderoom.sandbox.runtimes.base import RuntimePlan, RuntimeStep, SandboxRuntime
from coderoom.sandbox.runtimes.docker_runtime import DockerSandboxRuntime
from coderoom.sandbox.runtimes.local_runtime import LocalSandboxRuntime
from coderoom.sandbox.runtimes.registry import available_runtimes, create_runtime

__all__ = [
    "RuntimePlan",
    "RuntimeStep",
    "SandboxRuntime",
    "DockerSandboxRuntime",
    "LocalSandboxRuntime",
    "available_runtimes",
    "create_runtime",
]
