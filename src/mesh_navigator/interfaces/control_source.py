"""Abstract interface for the source of navigation control events."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from .page import Page


@dataclass(frozen=True)
class ControlEvent:
    """A control symbol sent by an actor against a posted message."""

    message_id: str | None
    actor: str
    symbol: str


ControlHandler = Callable[[ControlEvent], bool]


class ControlEventSource(ABC):
    """Minimal contract the navigation engine needs from a transport."""

    @abstractmethod
    def post(self, destination: str, page: Page) -> str:
        """Post a page to a destination.

        Returns:
            Identity of the posted message, used to address later edits.
        """
        pass

    @abstractmethod
    def edit(self, message_id: str, page: Page) -> None:
        """Replace the content of a posted message.

        Raises:
            RuntimeError: If the message can no longer be edited.
        """
        pass

    @abstractmethod
    def subscribe(self, handler: ControlHandler) -> None:
        """Register a handler for control events.

        The handler returns True when it consumed the event.
        """
        pass

    @abstractmethod
    def unsubscribe(self, handler: ControlHandler) -> None:
        """Remove a previously registered handler."""
        pass
