"""Renderable page produced by views and shown by transports."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Page:
    """A single screen of content.

    The navigation engine never looks inside a page except to attach
    the positional footer.
    """

    title: str = ""
    body: str = ""
    fields: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    color: str | None = None
    image: str | None = None
    footer: str | None = None
