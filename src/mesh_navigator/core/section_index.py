"""Section index mapping symbolic keys to absolute page offsets."""

import logging
from enum import Enum
from typing import Hashable, Iterable, Iterator

logger = logging.getLogger(__name__)


class GroupMode(Enum):
    """How the per-group extra page count is applied while walking sections."""

    # The whole section list is one group; the extra is added once at the end
    SINGLE = "single"
    # Every section is its own group; the extra is added after each section
    REPEATED = "repeated"


class SectionIndex:
    """Ordered mapping of section key to absolute page offset.

    Assigning an existing key overwrites its offset but keeps its original
    position in iteration order. Views rely on this last-write-wins rule to
    make a shared key jump to the last section that claimed it.
    """

    def __init__(self) -> None:
        self._offsets: dict[Hashable, int] = {}

    def assign(self, key: Hashable, offset: int) -> None:
        """Point key at offset, replacing any earlier assignment."""
        previous = self._offsets.get(key)
        if previous is not None and previous != offset:
            logger.debug(f"Section {key!r} moved from page {previous} to {offset}")
        self._offsets[key] = offset

    def get(self, key: Hashable, default: int | None = None) -> int | None:
        return self._offsets.get(key, default)

    def keys(self) -> list[Hashable]:
        return list(self._offsets)

    def items(self) -> list[tuple[Hashable, int]]:
        return list(self._offsets.items())

    def __getitem__(self, key: Hashable) -> int:
        return self._offsets[key]

    def __contains__(self, key: object) -> bool:
        return key in self._offsets

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._offsets)

    def __len__(self) -> int:
        return len(self._offsets)

    def __repr__(self) -> str:
        return f"SectionIndex({self._offsets!r})"


class SectionIndexBuilder:
    """Walks sections in order, keeping a running absolute page offset."""

    def __init__(self, base: int = 0):
        if base < 0:
            raise ValueError(f"base must be >= 0, got {base}")
        self._index = SectionIndex()
        self._offset = base

    @property
    def offset(self) -> int:
        """The next unassigned absolute page."""
        return self._offset

    def add(self, key: Hashable, item_count: int) -> int:
        """
        Assign key the current offset and advance past its items.

        Returns:
            The offset assigned to key.
        """
        if item_count < 0:
            raise ValueError(f"item_count must be >= 0 for {key!r}, got {item_count}")
        assigned = self._offset
        self._index.assign(key, assigned)
        self._offset += item_count
        return assigned

    def skip(self, count: int) -> None:
        """Advance the offset over pages that have no key."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self._offset += count

    def add_group(
        self,
        sections: Iterable[tuple[Hashable, int]],
        group_extra: int = 0,
        mode: GroupMode = GroupMode.REPEATED,
    ) -> None:
        """Add sections, applying group_extra per section or once at the end."""
        for key, item_count in sections:
            self.add(key, item_count)
            if mode is GroupMode.REPEATED:
                self.skip(group_extra)
        if mode is GroupMode.SINGLE:
            self.skip(group_extra)

    def build(self) -> tuple[SectionIndex, int]:
        """Return the index and the final offset."""
        return self._index, self._offset


def build_section_index(
    sections: Iterable[tuple[Hashable, int]],
    base: int = 0,
    group_extra: int = 0,
    mode: GroupMode = GroupMode.REPEATED,
) -> tuple[SectionIndex, int]:
    """
    Build a section index from ordered (key, item_count) pairs.

    Args:
        sections: Ordered sections with the number of pages each holds.
        base: Absolute offset of the first section.
        group_extra: Extra pages bundled with each group (e.g. a headline page).
        mode: Whether group_extra follows every section or the whole list.

    Returns:
        Tuple of (index, final_offset). The final offset is where a trailing
        uniformly-sized section would start.
    """
    builder = SectionIndexBuilder(base)
    builder.add_group(sections, group_extra, mode)
    return builder.build()
