"""
Supported execution languages.

Each language declares its entry-point filename, an optional build step and
the run step, all as argument vectors. Nothing here is ever combined with
user-supplied text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from coderoom.errors import UnsupportedLanguageError, ValidationError


class Language(str, Enum):
    """Enumerated target runtimes."""

    JAVA = "java"
    PYTHON = "python"


@dataclass(frozen=True)
class LanguageSpec:
    """How to materialize and run source for one language."""

    language: Language
    entry_file: str
    run: list[str]
    build: Optional[list[str]] = None
    image_setting: str = ""
    env: dict[str, str] = field(default_factory=dict)

    @property
    def compiled(self) -> bool:
        return self.build is not None


LANGUAGE_SPECS: dict[Language, LanguageSpec] = {
    Language.JAVA: LanguageSpec(
        language=Language.JAVA,
        entry_file="Main.java",
        build=["javac", "Main.java"],
        run=["java", "Main"],
        image_setting="java_image",
    ),
    Language.PYTHON: LanguageSpec(
        language=Language.PYTHON,
        entry_file="main.py",
        run=["python", "main.py"],
        image_setting="python_image",
        env={"PYTHONUNBUFFERED": "1", "PYTHONIOENCODING": "UTF-8"},
    ),
}


def supported_languages() -> list[str]:
    return [lang.value for lang in Language]


def is_supported(language: Optional[str]) -> bool:
    return language in supported_languages()


def resolve_language(language: Optional[str]) -> LanguageSpec:
    """
    Look up the spec for a language identifier.

    Raises:
        ValidationError: If no language was given.
        UnsupportedLanguageError: If the identifier is not supported.
    """
    if not language:
        raise ValidationError("Language is required")
    if not is_supported(language):
        raise UnsupportedLanguageError(language)
    return LANGUAGE_SPECS[Language(language)]
