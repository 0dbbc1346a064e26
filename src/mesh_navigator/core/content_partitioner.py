"""Content partitioner for grouping text chunks into budgeted pages."""

from dataclasses import dataclass
from typing import Iterable


def partition(chunks: Iterable[str], budget: int, separator: str = "\n") -> list[str]:
    """
    Greedily group ordered chunks into pages of at most budget characters.

    Chunks are joined with separator and never split. A chunk that alone
    exceeds the budget is placed on its own page untouched. Each page is
    trimmed of surrounding whitespace when flushed, and pages left blank
    (runs of empty lines) are dropped.

    Args:
        chunks: Ordered atomic text chunks (e.g. lines).
        budget: Soft character limit per page.
        separator: String placed between chunks on the same page.

    Returns:
        Ordered list of pages. Empty input yields no pages.

    Raises:
        ValueError: If budget is not positive.
    """
    if budget <= 0:
        raise ValueError(f"budget must be > 0, got {budget}")

    pages: list[str] = []
    current: list[str] = []
    length = 0

    for chunk in chunks:
        if current and length + len(separator) + len(chunk) > budget:
            _flush(pages, separator.join(current))
            current = []
            length = 0

        if current:
            length += len(separator)
        current.append(chunk)
        length += len(chunk)

    if current:
        _flush(pages, separator.join(current))

    return pages


def _flush(pages: list[str], page: str) -> None:
    page = page.strip()
    if page:
        pages.append(page)


@dataclass
class ContentPartitioner:
    """Splits ordered chunks into pages using a configured budget."""

    budget: int = 200
    separator: str = "\n"

    def partition(self, chunks: Iterable[str]) -> list[str]:
        """Partition chunks with this partitioner's budget and separator."""
        return partition(chunks, self.budget, self.separator)

    def partition_text(self, text: str) -> list[str]:
        """Partition text line by line, dropping blank leading/trailing lines."""
        text = text.strip("\n")
        if not text.strip():
            return []
        return self.partition(text.split("\n"))
