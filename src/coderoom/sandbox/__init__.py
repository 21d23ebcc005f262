"""
Sandbox Module
==============

Isolated, time-bounded execution of user-submitted source.

Configuration is read from coderoom.config.CONFIG (single source of truth).

Usage:
    from coderoom.sandbox import SandboxOrchestrator

    orchestrator = SandboxOrchestrator()
    result = await orchestrator.execute('print("hi")', "python")
    result.status, result.output
"""

from coderoom.sandbox.languages import (
    LANGUAGE_SPECS,
    Language,
    LanguageSpec,
    is_supported,
    resolve_language,
    supported_languages,
)
from coderoom.sandbox.models import (
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
    RunRequest,
    RunResponse,
)
from coderoom.sandbox.orchestrator import SandboxOrchestrator

__all__ = [
    "LANGUAGE_SPECS",
    "Language",
    "LanguageSpec",
    "is_supported",
    "resolve_language",
    "supported_languages",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "RunRequest",
    "RunResponse",
    "SandboxOrchestrator",
]
