"""Splitting rendered text into radio-sized frames."""

import textwrap

from ..core.content_partitioner import partition


def _indicator(total: int) -> int:
    """Length of the widest " [i/total]" suffix."""
    return len(f" [{total}/{total}]")


def _pack(text: str, width: int) -> list[str]:
    lines: list[str] = []
    for line in text.split("\n"):
        if len(line) <= width:
            lines.append(line)
        else:
            lines.extend(textwrap.wrap(line, width, break_long_words=True))
    return partition(lines, width)


def split_frames(text: str, max_size: int = 230) -> list[str]:
    """
    Split text into frames of at most max_size characters.

    Text that fits is returned as one frame without an indicator. Longer
    text is split on line boundaries where possible (lines longer than a
    frame are wrapped at word boundaries) and every frame ends with [n/total].
    Room for the indicator grows with the number of frames.

    Args:
        text: Rendered message text.
        max_size: Radio payload limit in characters.

    Returns:
        List of frames. Blank text yields no frames.

    Raises:
        ValueError: If max_size leaves no room next to the indicator.
    """
    text = text.strip()
    if not text:
        return []

    if len(text) <= max_size:
        return [text]

    reserve = _indicator(1)
    while True:
        width = max_size - reserve
        if width <= 0:
            raise ValueError(f"max_size {max_size} leaves no room for frame indicators")
        frames = _pack(text, width)
        needed = _indicator(len(frames))
        if needed <= reserve:
            break
        reserve = needed

    total = len(frames)
    return [f"{frame} [{i}/{total}]" for i, frame in enumerate(frames, 1)]
