"""Core components for the Meshtastic Navigator."""

from .command_parser import CommandParser, Command, ListCommand, ReadCommand, GuideCommand, HelpCommand, InvalidCommand
from .content_partitioner import ContentPartitioner, partition
from .controls import ControlMap, NavigationEvent, First, Prev, Next, Last, JumpTo, Close
from .dispatcher import NavigationDispatcher
from .menu_renderer import MenuRenderer, PageRenderer, sort_entries
from .section_index import GroupMode, SectionIndex, SectionIndexBuilder, build_section_index
from .session import Bookmark, NavigationSession, SessionState, pages_provider
from .session_registry import SessionRegistry

__all__ = [
    "CommandParser",
    "Command",
    "ListCommand",
    "ReadCommand",
    "GuideCommand",
    "HelpCommand",
    "InvalidCommand",
    "ContentPartitioner",
    "partition",
    "ControlMap",
    "NavigationEvent",
    "First",
    "Prev",
    "Next",
    "Last",
    "JumpTo",
    "Close",
    "NavigationDispatcher",
    "MenuRenderer",
    "PageRenderer",
    "sort_entries",
    "GroupMode",
    "SectionIndex",
    "SectionIndexBuilder",
    "build_section_index",
    "Bookmark",
    "NavigationSession",
    "SessionState",
    "pages_provider",
    "SessionRegistry",
]
