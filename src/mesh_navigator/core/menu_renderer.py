"""Renderers turning listings and pages into plain text."""

from ..interfaces import Entry, Page


def sort_entries(entries: list[Entry]) -> list[Entry]:
    """Directories first, then files, alphabetically within each."""
    dirs = sorted([e for e in entries if e.is_dir], key=lambda e: e.name.lower())
    files = sorted([e for e in entries if not e.is_dir], key=lambda e: e.name.lower())
    return dirs + files


class MenuRenderer:
    """Renders directory listings as numbered menu lines."""

    def lines(self, entries: list[Entry], start: int = 1) -> list[str]:
        """
        Render entries as numbered lines, one per entry.

        Entries are rendered in the order given; directories get a trailing /.
        The lines are atomic chunks for the content partitioner.

        Args:
            entries: Entries to render.
            start: Number of the first entry.

        Returns:
            List of "n. name" lines.
        """
        result = []
        for i, entry in enumerate(entries, start):
            name = f"{entry.name}/" if entry.is_dir else entry.name
            result.append(f"{i}. {name}")
        return result


class PageRenderer:
    """Renders a Page as the text body of a radio message."""

    def render(self, page: Page, hint: str | None = None) -> str:
        """
        Render a page as text.

        Layout is title in brackets, body, "name: value" fields, image
        link, then footer and control hint on the last line.

        Args:
            page: The page to render.
            hint: Optional control hint appended to the footer line.

        Returns:
            Rendered text.
        """
        lines = []

        if page.title:
            lines.append(f"[{page.title}]")

        if page.body:
            lines.append(page.body)

        for name, value in page.fields:
            lines.append(f"{name}: {value}")

        if page.image:
            lines.append(f"<{page.image}>")

        tail = " | ".join(part for part in (page.footer, hint) if part)
        if tail:
            lines.append(f"({tail})")

        return "\n".join(lines) if lines else "(empty)"
