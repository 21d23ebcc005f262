"""
Session language state: the one shared "selected language" per session.
"""

from typing import Optional

from coderoom.config import CONFIG
from coderoom.logger import get_logger

logger = get_logger(__name__)


class SessionLanguageState:
    """
    Maps session id to its current execution language (last write wins).

    A session gets ``default_language`` the first time it is seen and is never
    unset afterwards; the value is kept when a session empties so a later
    rejoin sees the last selection.
    """

    def __init__(self, default_language: Optional[str] = None):
        self.default_language = default_language or CONFIG.default_language
        self._languages: dict[str, str] = {}

    def ensure(self, session_id: str) -> str:
        """Return the session language, assigning the default on first use."""
        if session_id not in self._languages:
            self._languages[session_id] = self.default_language
            logger.debug(
                f"Session {session_id} language defaulted to {self.default_language}"
            )
        return self._languages[session_id]

    def get(self, session_id: str) -> Optional[str]:
        return self._languages.get(session_id)

    def set(self, session_id: str, language: str) -> None:
        self._languages[session_id] = language
        logger.info(f"Session {session_id} language changed to: {language}")

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._languages
