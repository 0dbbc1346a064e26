"""Abstract interfaces for the Meshtastic Navigator."""

from .control_source import ControlEvent, ControlEventSource
from .document_store import DocumentStore, Entry
from .page import Page

__all__ = ["ControlEvent", "ControlEventSource", "DocumentStore", "Entry", "Page"]
