"""Navigation dispatcher: routes control events to live sessions."""

import logging
import threading
import time
from typing import Callable

from ..interfaces import ControlEvent, ControlEventSource
from .controls import ControlMap
from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class NavigationDispatcher:
    """Applies control events to the sessions they address.

    Navigation is silent: events for unknown sessions, unrecognised
    symbols and out-of-range moves produce no reply at all.
    """

    def __init__(
        self,
        source: ControlEventSource,
        registry: SessionRegistry,
        controls: ControlMap | None = None,
        debounce_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the dispatcher.

        Args:
            source: Control event source, also used to edit messages.
            registry: Registry holding live sessions.
            controls: Symbol mapping (defaults to DEFAULT_SYMBOLS).
            debounce_seconds: Drop repeats of the same symbol from the same
                              actor on the same message within this window.
                              0 disables debouncing.
            clock: Monotonic clock for the debounce window.
        """
        self.source = source
        self.registry = registry
        self.controls = controls or ControlMap()
        self._debounce = debounce_seconds
        self._clock = clock
        self._recent: dict[tuple[str, str, str], float] = {}
        self._recent_lock = threading.Lock()

    def start(self) -> None:
        """Subscribe to the control event source."""
        self.source.subscribe(self.handle)

    def stop(self) -> None:
        """Unsubscribe from the control event source."""
        self.source.unsubscribe(self.handle)

    def handle(self, event: ControlEvent) -> bool:
        """
        Handle one control event.

        Returns:
            True if the symbol is a control, whether or not it changed
            anything. Fixed controls are consumed even when no live session
            matches; jump symbols only while their session is live.
        """
        session = self.registry.get(event.message_id)
        if session is None:
            # Controls for a closed or expired session are dropped silently
            return self.controls.resolve(event.symbol) is not None

        navigation = self.controls.resolve(event.symbol, event.actor, session.jump_symbols())
        if navigation is None:
            return False

        if self._is_repeat(event):
            logger.debug(f"[{event.message_id}] Dropped repeated {event.symbol!r} from {event.actor}")
            return True

        with session.lock:
            page = session.apply(navigation)
            if page is None:
                return True

            try:
                self.source.edit(event.message_id, page)
            except Exception as e:
                logger.error(f"[{event.message_id}] Render failed: {e}")
                session.close("closed after render failure")
        return True

    def _is_repeat(self, event: ControlEvent) -> bool:
        if self._debounce <= 0:
            return False

        now = self._clock()
        key = (event.message_id, event.actor, ControlMap.normalize(event.symbol))
        with self._recent_lock:
            self._recent = {k: t for k, t in self._recent.items() if now - t < self._debounce}
            if key in self._recent:
                return True
            self._recent[key] = now
        return False
