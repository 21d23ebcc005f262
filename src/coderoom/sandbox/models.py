"""
Pydantic models for sandbox execution.

Covers:
- The internal request/result pair passed through the orchestrator
- REST API request/response schemas for ``POST /run``
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from coderoom.sandbox.languages import Language


class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    RUNTIME_ERROR = "runtime-error"
    TIMEOUT = "timeout"
    SETUP_ERROR = "setup-error"


class ExecutionRequest(BaseModel):
    """A validated request: source, target language and the upfront stdin payload."""

    code: str
    language: Language
    stdin: str = ""


class ExecutionResult(BaseModel):
    """Captured output of one sandbox run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    output: str
    status: ExecutionStatus
    run_id: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS


# ─── REST API Models ─────────────────────────────────────────────────


class RunRequest(BaseModel):
    """POST /run request body. ``input`` and ``stdin`` are interchangeable."""

    code: str | None = None
    language: str | None = None
    stdin: str | None = Field(
        default=None, validation_alias=AliasChoices("input", "stdin")
    )


class RunResponse(BaseModel):
    """POST /run response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    output: str
    status: ExecutionStatus
    run_id: str
    duration_ms: int
