"""Session registry for tracking live navigation sessions by message."""

import logging
import threading
import time
from typing import Callable, Hashable, Sequence

from ..interfaces import ControlEventSource
from .section_index import SectionIndex
from .session import Bookmark, NavigationSession, TimerFactory, start_timer

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every live navigation session.

    Sessions are keyed by the identity of the message they control. The
    registry lock only guards the mapping itself; transitions lock the
    individual session.
    """

    def __init__(
        self,
        timeout_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: TimerFactory = start_timer,
    ):
        """
        Initialize the registry.

        Args:
            timeout_seconds: Inactivity timeout given to each session.
                            Default is 5 minutes.
            clock: Clock handed to sessions.
            timer_factory: Timer factory handed to sessions.
        """
        self._sessions: dict[str, NavigationSession] = {}
        self._lock = threading.Lock()
        self._timeout = timeout_seconds
        self._clock = clock
        self._timer_factory = timer_factory

    def open(
        self,
        source: ControlEventSource,
        destination: str,
        bookmarks: Sequence[Bookmark],
        start: int | Hashable = 0,
        sections: SectionIndex | None = None,
    ) -> str | None:
        """
        Create a session, post its first page and start tracking it.

        Args:
            source: Where to post the message.
            destination: Who the message is posted to.
            bookmarks: The session's bookmarks.
            start: Start selector (absolute page, bookmark name or section key).
            sections: Section index for start and jump resolution.

        Returns:
            The posted message id, or None if there was nothing to show.
        """
        session = NavigationSession(
            bookmarks,
            start=start,
            sections=sections,
            timeout_seconds=self._timeout,
            clock=self._clock,
            timer_factory=self._timer_factory,
        )
        page = session.render()
        if page is None:
            logger.info(f"[{destination}] Nothing to show at start {start!r}")
            return None

        message_id = source.post(destination, page)
        self.track(message_id, session)
        return message_id

    def track(self, message_id: str, session: NavigationSession) -> None:
        """Start tracking a session, replacing any session on the same message."""
        session.message_id = message_id
        with self._lock:
            previous = self._sessions.get(message_id)
            self._sessions[message_id] = session
        if previous is not None and previous is not session:
            previous.close("replaced")
        session.arm(self._forget)
        logger.info(f"[{message_id}] Session opened with {len(session.bookmarks)} bookmark(s)")

    def get(self, message_id: str | None) -> NavigationSession | None:
        """Look up a live session, or None if untracked."""
        if message_id is None:
            return None
        with self._lock:
            return self._sessions.get(message_id)

    def close(self, message_id: str, reason: str = "closed") -> bool:
        """
        Close and stop tracking a session.

        Returns:
            True if a session was tracked under message_id.
        """
        session = self.get(message_id)
        if session is None:
            return False
        session.close(reason)
        return True

    def close_all(self) -> int:
        """Close every session. Returns how many were closed."""
        with self._lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            session.close("shut down")
        return len(sessions)

    def session_count(self) -> int:
        """Get the number of live sessions."""
        with self._lock:
            return len(self._sessions)

    def list_messages(self) -> list[str]:
        """Get the ids of all tracked messages."""
        with self._lock:
            return list(self._sessions.keys())

    def _forget(self, session: NavigationSession) -> None:
        with self._lock:
            if self._sessions.get(session.message_id) is session:
                del self._sessions[session.message_id]
