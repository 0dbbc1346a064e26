"""Navigation events and the control symbols that produce them."""

from abc import ABC
from dataclasses import dataclass
from typing import Hashable, Mapping


class NavigationEvent(ABC):
    """Base class for all navigation events."""

    pass


@dataclass(frozen=True)
class First(NavigationEvent):
    """Go to the first page of the active bookmark."""

    actor: str | None = None


@dataclass(frozen=True)
class Prev(NavigationEvent):
    """Go to the previous page of the active bookmark."""

    actor: str | None = None


@dataclass(frozen=True)
class Next(NavigationEvent):
    """Go to the next page of the active bookmark."""

    actor: str | None = None


@dataclass(frozen=True)
class Last(NavigationEvent):
    """Go to the last page of the active bookmark."""

    actor: str | None = None


@dataclass(frozen=True)
class JumpTo(NavigationEvent):
    """Switch to a bookmark or jump to an indexed section."""

    key: Hashable
    actor: str | None = None


@dataclass(frozen=True)
class Close(NavigationEvent):
    """End the session."""

    actor: str | None = None


DEFAULT_SYMBOLS = {
    "first": "<<",
    "prev": "<",
    "next": ">",
    "last": ">>",
    "close": "x",
}

_EVENT_TYPES = {
    "first": First,
    "prev": Prev,
    "next": Next,
    "last": Last,
    "close": Close,
}


class ControlMap:
    """Translates control symbols into navigation events.

    Symbols are matched case-insensitively after trimming, the same way
    typed commands are.
    """

    def __init__(self, symbols: Mapping[str, str] | None = None):
        """
        Args:
            symbols: Mapping of action name (first, prev, next, last, close)
                     to the symbol that triggers it. Missing actions use
                     DEFAULT_SYMBOLS.

        Raises:
            ValueError: On unknown actions or a symbol bound twice.
        """
        merged = dict(DEFAULT_SYMBOLS)
        for action, symbol in (symbols or {}).items():
            if action not in _EVENT_TYPES:
                raise ValueError(f"Unknown control action: {action}")
            merged[action] = symbol

        self._actions: dict[str, str] = {}
        for action, symbol in merged.items():
            normalized = self.normalize(symbol)
            if not normalized:
                raise ValueError(f"Empty symbol for control action: {action}")
            if normalized in self._actions:
                raise ValueError(f"Symbol {symbol!r} bound to both {self._actions[normalized]} and {action}")
            self._actions[normalized] = action
        self.symbols = merged

    @staticmethod
    def normalize(symbol: str) -> str:
        return symbol.strip().lower()

    def resolve(
        self,
        symbol: str,
        actor: str | None = None,
        jump_symbols: Mapping[str, Hashable] | None = None,
    ) -> NavigationEvent | None:
        """
        Resolve a symbol to a navigation event.

        Fixed controls take precedence over jump symbols.

        Args:
            symbol: The raw symbol received.
            actor: Identity of whoever sent it.
            jump_symbols: Session-specific symbol -> jump key mapping.

        Returns:
            The event, or None if the symbol is not a control.
        """
        normalized = self.normalize(symbol)
        action = self._actions.get(normalized)
        if action is not None:
            return _EVENT_TYPES[action](actor=actor)

        if jump_symbols and normalized in jump_symbols:
            return JumpTo(key=jump_symbols[normalized], actor=actor)

        return None

    def hint(self) -> str:
        """Short help line listing the fixed controls."""
        return " ".join(f"{self.symbols[a]}={a}" for a in ("first", "prev", "next", "last", "close"))
