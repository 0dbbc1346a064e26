"""NavigatorServer - Main orchestrator for the Meshtastic Navigator."""

import logging

from .interfaces import ControlEventSource, DocumentStore
from .core import (
    CommandParser,
    ListCommand,
    ReadCommand,
    GuideCommand,
    HelpCommand,
    InvalidCommand,
    ContentPartitioner,
    ControlMap,
    MenuRenderer,
    NavigationDispatcher,
    SessionRegistry,
)
from .config import Config
from .views import View, document_view, guide_view, listing_view

logger = logging.getLogger(__name__)


class NavigatorServer:
    """Wires commands, views and navigation sessions to a transport.

    Browse commands open navigation sessions; control symbols sent while
    a session is live are consumed by the dispatcher before they ever
    reach the command handler.
    """

    HELP_TEXT = """Navigator Help:
ls [path] - List folder
read <path> [sN] - Read file
guide [path] [name] - Folder guide
? - This help"""

    def __init__(
        self,
        store: DocumentStore,
        transport: ControlEventSource,
        config: Config | None = None,
        registry: SessionRegistry | None = None,
    ):
        """
        Initialize the navigator server.

        Args:
            store: Store holding the browsable documents.
            transport: Transport for posting pages and receiving messages.
                       Must also offer send(node_id, text) and on_message().
            config: Server configuration (uses defaults if None).
            registry: Session registry (built from config if None).
        """
        self.store = store
        self.transport = transport
        self.config = config or Config()

        self.parser = CommandParser()
        self.partitioner = ContentPartitioner(budget=self.config.page_budget)
        self.renderer = MenuRenderer()
        self.controls = ControlMap(self.config.controls)
        self.registry = registry or SessionRegistry(timeout_seconds=self.config.timeout_seconds)
        self.dispatcher = NavigationDispatcher(
            transport,
            self.registry,
            self.controls,
            debounce_seconds=self.config.debounce_seconds,
        )

        self.dispatcher.start()
        self.transport.on_message(self._handle_message)

    def start(self) -> None:
        """Connect the transport; messages flow from here on."""
        logger.info("Starting navigator server...")
        self.transport.connect()
        logger.info("Navigator server ready")

    def stop(self) -> None:
        """Stop the server, closing every session."""
        logger.info("Stopping navigator server...")
        closed = self.registry.close_all()
        logger.info(f"Closed {closed} session(s)")
        self.transport.disconnect()
        logger.info("Server stopped")

    def _handle_message(self, node_id: str, message: str) -> None:
        """Run text no live session consumed as a command and reply."""
        logger.info(f"[{node_id}] <- {message!r}")

        try:
            command = self.parser.parse(message)
            logger.debug(f"[{node_id}] Parsed as {type(command).__name__}")
            reply = self._process_command(node_id, command)
            if reply is not None:
                self.transport.send(node_id, reply)
        except Exception as e:
            logger.error(f"[{node_id}] Command failed: {e}")
            self._send_error(node_id, str(e))

    def _process_command(self, node_id: str, command) -> str | None:
        """
        Process a command.

        Returns:
            A plain text reply, or None when a session was opened.
        """
        if isinstance(command, HelpCommand):
            return f"{self.HELP_TEXT}\n{self.controls.hint()}"

        if isinstance(command, InvalidCommand):
            logger.debug(f"Invalid command: {command.original_input}")
            return f"{command.reason}: {command.original_input}\nSend ? for help"

        if isinstance(command, ListCommand):
            if not self.store.is_directory(command.path):
                return f"Not a folder: {command.path}"
            return self._open(node_id, listing_view(self.store, command.path, self.partitioner, self.renderer))

        if isinstance(command, ReadCommand):
            if not self.store.exists(command.path) or self.store.is_directory(command.path):
                return f"File not found: {command.path}"
            try:
                view = document_view(self.store, command.path, self.partitioner, command.section)
            except KeyError:
                return f"Unknown section: {command.section}"
            return self._open(node_id, view, empty="(empty file)")

        if isinstance(command, GuideCommand):
            if not self.store.is_directory(command.path):
                return f"Not a folder: {command.path}"
            try:
                view = guide_view(self.store, command.path, self.partitioner, command.section, self.renderer)
            except KeyError:
                return f"Unknown section: {command.section}"
            return self._open(node_id, view)

        return "Unknown command type"

    def _open(self, node_id: str, view: View, empty: str = "(empty)") -> str | None:
        message_id = self.registry.open(
            self.transport,
            node_id,
            view.bookmarks,
            start=view.start,
            sections=view.sections,
        )
        if message_id is None:
            return empty
        return None

    def _send_error(self, node_id: str, error: str) -> None:
        """Report a failure, cut to one radio message."""
        message = f"Error: {error}"
        limit = self.config.max_message_size
        if len(message) > limit:
            message = message[: limit - 3] + "..."
        self.transport.send(node_id, message)
