"""Process-scoped status notice and active-agent indicator.

Both are plain objects handed to every controller; renderers subscribe to
changes instead of reading globals.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from mail_hub.config import STATUS_TTL_SECONDS

logger = logging.getLogger(__name__)

NOTICE_KINDS = ("success", "error", "info")


@dataclass(frozen=True)
class StatusNotice:
    """A transient banner message."""

    text: str
    kind: str  # "success", "error", "info"
    created_at: float


class _Subscribers:
    def __init__(self):
        self._callbacks: list[Callable] = []

    def subscribe(self, callback: Callable) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _notify(self, value) -> None:
        for callback in list(self._callbacks):
            callback(value)


class StatusBoard(_Subscribers):
    """Holds at most one notice, which expires ``ttl`` seconds after posting."""

    def __init__(self, ttl: float = STATUS_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.ttl = ttl
        self._clock = clock
        self._notice: StatusNotice | None = None

    def post(self, text: str, kind: str = "info") -> StatusNotice:
        if kind not in NOTICE_KINDS:
            raise ValueError(f"Unknown notice kind: {kind}")
        self._notice = StatusNotice(text=text, kind=kind, created_at=self._clock())
        log = logger.warning if kind == "error" else logger.info
        log(f"[{kind}] {text}")
        self._notify(self._notice)
        return self._notice

    @property
    def current(self) -> StatusNotice | None:
        if self._notice is None:
            return None
        if self._clock() - self._notice.created_at >= self.ttl:
            self._notice = None
            self._notify(None)
        return self._notice

    def dismiss(self) -> None:
        self._notice = None
        self._notify(None)


class AgentActivity(_Subscribers):
    """Best-effort indicator of which agent is currently being called."""

    def __init__(self):
        super().__init__()
        self.active_agent_id: str | None = None

    def start(self, agent_id: str) -> None:
        self.active_agent_id = agent_id
        self._notify(agent_id)

    def finish(self) -> None:
        self.active_agent_id = None
        self._notify(None)

    @property
    def is_processing(self) -> bool:
        return self.active_agent_id is not None

    @contextmanager
    def running(self, agent_id: str) -> Iterator[None]:
        """Mark ``agent_id`` active for the duration of the block."""
        self.start(agent_id)
        try:
            yield
        finally:
            self.finish()
