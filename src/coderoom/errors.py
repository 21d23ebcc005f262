"""
Error taxonomy for coderoom.

Sandbox run failures (non-zero exit, build failure, timeout) are not
exceptions; they are reported through ``ExecutionResult.status``.
"""


class CoderoomError(Exception):
    """Base class for all coderoom errors."""


class ValidationError(CoderoomError):
    """Raised when an execution request is missing code or language."""


class UnsupportedLanguageError(ValidationError):
    """Raised when a language is not in the supported set."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported language: {language}")


class SandboxSetupError(CoderoomError):
    """Raised when a working directory or runtime cannot be provisioned."""


class ChannelConnectError(CoderoomError):
    """Raised when a room channel cannot be established or joined."""
