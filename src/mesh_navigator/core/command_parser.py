"""Command parser for interpreting browse requests."""

from abc import ABC
from dataclasses import dataclass


class Command(ABC):
    """Base class for all commands."""

    pass


@dataclass(frozen=True)
class ListCommand(Command):
    """Command to page through a directory listing."""

    path: str = "/"


@dataclass(frozen=True)
class ReadCommand(Command):
    """Command to page through a document, optionally from a section."""

    path: str
    section: str | None = None


@dataclass(frozen=True)
class GuideCommand(Command):
    """Command to page through a directory guide, optionally from a section."""

    path: str = "/"
    section: str | None = None


@dataclass(frozen=True)
class HelpCommand(Command):
    """Command to display help information."""

    pass


@dataclass(frozen=True)
class InvalidCommand(Command):
    """Represents an invalid or unrecognized command."""

    original_input: str
    reason: str = "Unknown command"


class CommandParser:
    """Parses user input strings into Command objects."""

    # Command mappings
    LIST_COMMANDS = {"ls", "list"}
    READ_COMMANDS = {"r", "read"}
    GUIDE_COMMANDS = {"g", "guide"}
    HELP_COMMANDS = {"?", "help"}

    def parse(self, input_str: str) -> Command:
        """
        Parse a user input string into a Command object.

        Args:
            input_str: The raw input string from the user.

        Returns:
            A Command object representing the parsed input.
        """
        parts = input_str.split()

        if not parts:
            return InvalidCommand(
                original_input=input_str, reason="Empty input"
            )

        # Only the verb is case-insensitive; paths keep their case
        verb, args = parts[0].lower(), parts[1:]

        if verb in self.HELP_COMMANDS:
            return HelpCommand()

        if verb in self.LIST_COMMANDS:
            if len(args) > 1:
                return InvalidCommand(
                    original_input=input_str, reason="Usage: ls [path]"
                )
            return ListCommand(path=self._normalize_path(args[0] if args else "/"))

        if verb in self.READ_COMMANDS:
            if not args or len(args) > 2:
                return InvalidCommand(
                    original_input=input_str, reason="Usage: read <path> [section]"
                )
            return ReadCommand(
                path=self._normalize_path(args[0]),
                section=args[1].lower() if len(args) > 1 else None,
            )

        if verb in self.GUIDE_COMMANDS:
            if len(args) > 2:
                return InvalidCommand(
                    original_input=input_str, reason="Usage: guide [path] [section]"
                )
            return GuideCommand(
                path=self._normalize_path(args[0] if args else "/"),
                section=args[1].lower() if len(args) > 1 else None,
            )

        return InvalidCommand(
            original_input=input_str, reason="Unknown command"
        )

    @staticmethod
    def _normalize_path(path: str) -> str:
        """Make a path absolute within the content root."""
        return "/" + path.strip("/")
