"""Navigation session: the per-message paging state machine."""

import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Hashable, Protocol, Sequence

from ..interfaces import Page
from .controls import Close, First, JumpTo, Last, NavigationEvent, Next, Prev
from .section_index import SectionIndex

logger = logging.getLogger(__name__)

# Upper bound when discovering the length of a bookmark without a page count
MAX_PROBE_PAGES = 1000

PageProvider = Callable[[int], Page | None]


class Cancellable(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Cancellable]


def start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Start a daemon timer calling callback after delay seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


@dataclass(frozen=True)
class Bookmark:
    """A named, independently paged section of a session.

    Attributes:
        name: Unique name within the session; also a jump key.
        provider: Returns the page at a relative index, or None past the end.
        symbol: Control symbol that jumps here. None hides the bookmark from
                the controls; it stays reachable as the start selector.
        page_count: Number of pages when known up front.
    """

    name: str
    provider: PageProvider
    symbol: str | None = None
    page_count: int | None = None


def pages_provider(pages: Sequence[Page]) -> PageProvider:
    """Wrap a prebuilt page list as a provider."""

    def provide(page: int) -> Page | None:
        if 0 <= page < len(pages):
            return pages[page]
        return None

    return provide


class SessionState(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class NavigationSession:
    """Navigation state bound to one posted message.

    Transitions only commit after the provider returns a page for the
    candidate position, so out-of-range moves leave the session untouched.
    All state changes happen under ``lock``, which callers also hold while
    editing the message so that edits for one session stay in order.
    """

    def __init__(
        self,
        bookmarks: Sequence[Bookmark],
        start: int | Hashable = 0,
        sections: SectionIndex | None = None,
        timeout_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: TimerFactory = start_timer,
    ):
        """
        Initialize an active session.

        Args:
            bookmarks: Ordered bookmarks; absolute pages run through them in order.
            start: Absolute page number, bookmark name, or key in sections.
            sections: Section index for start and jump resolution.
            timeout_seconds: Inactivity timeout.
            clock: Monotonic clock returning seconds.
            timer_factory: Starts a cancellable expiry timer.

        Raises:
            ValueError: If there are no bookmarks, names repeat, or start is negative.
            KeyError: If start is neither a bookmark name nor a section key.
        """
        if not bookmarks:
            raise ValueError("A session needs at least one bookmark")
        names = [b.name for b in bookmarks]
        if len(set(names)) != len(names):
            raise ValueError(f"Bookmark names must be unique: {names}")

        self.bookmarks: tuple[Bookmark, ...] = tuple(bookmarks)
        self.sections = sections if sections is not None else SectionIndex()
        self.timeout_seconds = timeout_seconds
        self.message_id: str | None = None
        self.state = SessionState.ACTIVE
        self.lock = threading.RLock()

        self._clock = clock
        self._timer_factory = timer_factory
        self._timer: Cancellable | None = None
        self._generation = 0
        self._on_close: Callable[["NavigationSession"], None] | None = None
        self._page_counts: dict[int, int] = {
            i: b.page_count for i, b in enumerate(self.bookmarks) if b.page_count is not None
        }

        self.cursors: dict[str, int] = {name: 0 for name in names}
        self.active_index, cursor = self._resolve_start(start)
        self.cursors[self.active.name] = cursor

        self.created_at = self._clock()
        self.expires_at = self.created_at + self.timeout_seconds

    @property
    def active(self) -> Bookmark:
        return self.bookmarks[self.active_index]

    @property
    def cursor(self) -> int:
        """Relative page of the active bookmark."""
        return self.cursors[self.active.name]

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def page_count(self, index: int) -> int:
        """Pages in a bookmark, probing the provider once if not given."""
        if index not in self._page_counts:
            bookmark = self.bookmarks[index]
            count = 0
            while count < MAX_PROBE_PAGES and self._fetch(bookmark, count) is not None:
                count += 1
            self._page_counts[index] = count
        return self._page_counts[index]

    def base_offset(self, index: int) -> int:
        """Absolute page of a bookmark's first page."""
        return sum(self.page_count(i) for i in range(index))

    def total_pages(self) -> int:
        return sum(self.page_count(i) for i in range(len(self.bookmarks)))

    def absolute_page(self) -> int:
        return self.base_offset(self.active_index) + self.cursor

    def jump_symbols(self) -> dict[str, Hashable]:
        """
        Symbols that jump to visible bookmarks or indexed sections.

        A fixed (Enum) section shadows a string section with the same
        label; bookmark symbols shadow both.
        """
        symbols: dict[str, Hashable] = {}
        fixed: dict[str, Hashable] = {}
        for key in self.sections:
            if isinstance(key, Enum):
                label, target = key.value, fixed
            else:
                label, target = key, symbols
            if isinstance(label, str):
                target[label.strip().lower()] = key
        symbols.update(fixed)
        for bookmark in self.bookmarks:
            if bookmark.symbol:
                symbols[bookmark.symbol.strip().lower()] = bookmark.name
        return symbols

    def render(self) -> Page | None:
        """Render the current position, or None if the provider has no page."""
        with self.lock:
            page = self._fetch(self.active, self.cursor)
            if page is None:
                return None
            return self._decorate(page)

    def apply(self, event: NavigationEvent) -> Page | None:
        """
        Apply a navigation event.

        Returns:
            The page to show if the transition was accepted, else None.
        """
        with self.lock:
            if self.closed:
                return None

            if isinstance(event, Close):
                self.close("closed by request")
                return None

            target = self._candidate(event)
            if target is None:
                logger.debug(f"[{self.message_id}] No target for {event}")
                return None

            index, candidate = target
            bookmark = self.bookmarks[index]
            page = self._fetch(bookmark, candidate)
            if page is None:
                logger.debug(f"[{self.message_id}] {bookmark.name} page {candidate} out of range")
                return None

            self.active_index = index
            self.cursors[bookmark.name] = candidate
            self.touch()
            return self._decorate(page)

    def arm(self, on_close: Callable[["NavigationSession"], None] | None = None) -> None:
        """Start the expiry timer and register a hook run once on close."""
        with self.lock:
            self._on_close = on_close
            self._schedule()

    def touch(self) -> None:
        """Push the expiry deadline out by the full timeout."""
        with self.lock:
            self.expires_at = self._clock() + self.timeout_seconds
            if self._timer is not None:
                self._schedule()

    def close(self, reason: str = "closed") -> None:
        """Close the session, cancelling its timer. Idempotent."""
        with self.lock:
            if self.closed:
                return
            self.state = SessionState.CLOSED
            self._cancel_timer()
            logger.info(f"[{self.message_id}] Session {reason}")
            hook, self._on_close = self._on_close, None
            if hook is not None:
                hook(self)

    def _candidate(self, event: NavigationEvent) -> tuple[int, int] | None:
        index = self.active_index
        if isinstance(event, First):
            return index, 0
        if isinstance(event, Prev):
            return index, self.cursor - 1
        if isinstance(event, Next):
            return index, self.cursor + 1
        if isinstance(event, Last):
            return index, self.page_count(index) - 1
        if isinstance(event, JumpTo):
            return self._resolve_jump(event.key)
        return None

    def _resolve_jump(self, key: Hashable) -> tuple[int, int] | None:
        for index, bookmark in enumerate(self.bookmarks):
            if bookmark.name == key:
                return index, self.cursors[bookmark.name]
        offset = self.sections.get(key)
        if offset is None:
            return None
        return self._locate(offset)

    def _resolve_start(self, start: int | Hashable) -> tuple[int, int]:
        if isinstance(start, int) and not isinstance(start, bool):
            if start < 0:
                raise ValueError(f"start page must be >= 0, got {start}")
            return self._locate(start)
        for index, bookmark in enumerate(self.bookmarks):
            if bookmark.name == start:
                return index, 0
        offset = self.sections.get(start)
        if offset is None:
            raise KeyError(f"Unknown start section: {start!r}")
        return self._locate(offset)

    def _locate(self, absolute: int) -> tuple[int, int]:
        """Map an absolute page to (bookmark index, relative page)."""
        base = 0
        last = len(self.bookmarks) - 1
        for index in range(last):
            count = self.page_count(index)
            if absolute < base + count:
                return index, absolute - base
            base += count
        return last, absolute - base

    def _fetch(self, bookmark: Bookmark, page: int) -> Page | None:
        if page < 0:
            return None
        try:
            return bookmark.provider(page)
        except Exception as e:
            logger.warning(f"[{self.message_id}] Provider for {bookmark.name!r} failed on page {page}: {e}")
            return None

    def _decorate(self, page: Page) -> Page:
        position = f"page {self.absolute_page() + 1} / {self.total_pages()}"
        footer = f"{position} - {page.footer}" if page.footer else position
        return replace(page, footer=footer)

    def _schedule(self) -> None:
        self._cancel_timer()
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(self.timeout_seconds, lambda: self._expire(generation))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self, generation: int) -> None:
        with self.lock:
            # A reset or close since this timer was armed makes it stale
            if self.closed or generation != self._generation:
                return
            self._timer = None
            self.close("expired")
