"""Pytest configuration and fixtures."""

import itertools

import pytest
import tempfile
from pathlib import Path

from mesh_navigator.interfaces import ControlEvent, ControlEventSource, Page


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualTimer:
    """Timer that only fires when told to."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class ManualTimers:
    """Timer factory recording every timer it starts."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, delay, callback) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_all(self) -> None:
        for timer in list(self.live):
            timer.fire()


class MockTransport(ControlEventSource):
    """Mock transport for testing."""

    def __init__(self):
        self._callbacks = []
        self._handlers = []
        self._latest: dict[str, str] = {}
        self._sequence = itertools.count(1)
        self.posts: list[tuple[str, str, Page]] = []
        self.edits: list[tuple[str, Page]] = []
        self.sent_messages: list[tuple[str, str]] = []
        self.fail_edits = False
        self._connected = False

    def post(self, destination: str, page: Page) -> str:
        message_id = f"{destination}#{next(self._sequence)}"
        self._latest[destination] = message_id
        self.posts.append((destination, message_id, page))
        return message_id

    def edit(self, message_id: str, page: Page) -> None:
        if self.fail_edits:
            raise RuntimeError("Unknown message")
        self.edits.append((message_id, page))

    def subscribe(self, handler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def send(self, node_id: str, message: str, want_ack: bool = False) -> None:
        self.sent_messages.append((node_id, message))

    def on_message(self, callback) -> None:
        self._callbacks.append(callback)

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def simulate_message(self, node_id: str, text: str) -> None:
        """Simulate receiving text from a node."""
        event = ControlEvent(message_id=self._latest.get(node_id), actor=node_id, symbol=text.strip())
        consumed = False
        for handler in list(self._handlers):
            consumed = handler(event) or consumed
        if consumed:
            return
        for callback in self._callbacks:
            callback(node_id, text)


def make_pages(count: int, prefix: str = "p") -> list[Page]:
    """Pages whose body is prefix + index."""
    return [Page(title=prefix, body=f"{prefix}{i}") for i in range(count)]


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def temp_content_dir():
    """Create a temporary directory with sample content."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)

        (root / "documents").mkdir()
        (root / "documents" / "subfolder").mkdir()
        (root / "stories").mkdir()
        (root / ".hidden").mkdir()

        (root / "welcome.txt").write_text("Welcome to the mesh navigator!")
        (root / "documents" / "readme.txt").write_text(
            "This is a readme file with some content that explains things."
        )
        (root / "documents" / "long_file.txt").write_text(
            "\n".join(f"Line {i} of a long file" for i in range(60))
        )
        (root / "documents" / "subfolder" / "nested.txt").write_text(
            "Nested file content"
        )
        (root / "stories" / "tale.md").write_text(
            "A preface.\n# Beginning\nOnce upon a time.\n# Middle\nThings happened.\n# End\nThe end."
        )

        yield root


@pytest.fixture
def sample_directory_entries():
    """Sample directory entries for testing."""
    from mesh_navigator.interfaces import Entry
    return [
        Entry(name="documents", is_dir=True),
        Entry(name="images", is_dir=True),
        Entry(name="readme.txt", is_dir=False),
        Entry(name="config.yaml", is_dir=False),
    ]
