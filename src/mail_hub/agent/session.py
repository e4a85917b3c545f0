"""Session identifiers scoping one conversation with an agent."""

from __future__ import annotations

import logging
import secrets
import string
import time

logger = logging.getLogger(__name__)

_ALPHABET = string.digits + string.ascii_lowercase


def new_session_id() -> str:
    """Mint ``session_<epoch ms>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionManager:
    """Holds the session id of the conversation currently in progress.

    Follow-up turns reuse ``current`` so the remote agent keeps its memory;
    ``rotate`` starts a new conversation. Old ids are simply superseded.
    """

    def __init__(self):
        self._current = new_session_id()

    @property
    def current(self) -> str:
        return self._current

    def rotate(self) -> str:
        """Replace the current session with a fresh one and return it."""
        previous = self._current
        self._current = new_session_id()
        logger.debug(f"Rotated session {previous} -> {self._current}")
        return self._current

    def one_off(self) -> str:
        """Mint an id for a standalone exchange without touching ``current``."""
        return new_session_id()
