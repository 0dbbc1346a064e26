"""Browse views: build bookmarks and section indexes from documents.

Every view loads what it needs from the store up front, so page
providers never touch the store while a session is live.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable

from .core import (
    Bookmark,
    ContentPartitioner,
    GroupMode,
    MenuRenderer,
    SectionIndex,
    SectionIndexBuilder,
    build_section_index,
    pages_provider,
    sort_entries,
)
from .interfaces import DocumentStore, Entry, Page

logger = logging.getLogger(__name__)


class GuideSection(Enum):
    """Fixed sections of a directory guide."""

    OVERVIEW = "overview"
    FILES = "files"


@dataclass
class View:
    """Everything a session needs: bookmarks, sections and where to start."""

    bookmarks: list[Bookmark]
    sections: SectionIndex = field(default_factory=SectionIndex)
    start: int | Hashable = 0


def _join(base: str, name: str) -> str:
    return f"/{name}" if base == "/" else f"{base}/{name}"


def _text_pages(title: str, texts: list[str], empty: str = "(none)") -> list[Page]:
    if not texts:
        texts = [empty]
    return [Page(title=title, body=text) for text in texts]


def listing_view(
    store: DocumentStore,
    path: str,
    partitioner: ContentPartitioner,
    renderer: MenuRenderer | None = None,
) -> View:
    """
    Directory listing split into folder and file bookmarks.

    The session opens on a hidden summary page that sits between the
    folder pages and the file pages.
    """
    renderer = renderer or MenuRenderer()
    entries = sort_entries(store.list_directory(path))
    dirs = [e for e in entries if e.is_dir]
    files = [e for e in entries if not e.is_dir]

    dir_pages = _text_pages(f"{path} folders", partitioner.partition(renderer.lines(dirs)))
    file_pages = _text_pages(
        f"{path} files",
        partitioner.partition(renderer.lines(files, start=len(dirs) + 1)),
    )
    summary = partitioner.partition([
        f"{len(dirs)} folder(s), {len(files)} file(s)",
        "Send 'dirs' or 'files' to browse",
    ])
    summary_pages = _text_pages(path, summary)

    bookmarks = [
        Bookmark("Dirs", pages_provider(dir_pages), symbol="dirs", page_count=len(dir_pages)),
        Bookmark("Summary", pages_provider(summary_pages), page_count=len(summary_pages)),
        Bookmark("Files", pages_provider(file_pages), symbol="files", page_count=len(file_pages)),
    ]
    logger.debug(f"Listing {path}: {len(dir_pages)} folder page(s), {len(file_pages)} file page(s)")
    return View(bookmarks=bookmarks, start="Summary")


def _split_headings(text: str) -> tuple[list[str], list[tuple[str, list[str]]]]:
    """Split markdown-ish text into a preamble and (heading, lines) sections."""
    preamble: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    for line in text.strip("\n").split("\n"):
        if line.startswith("#"):
            sections.append((line.lstrip("#").strip(), [line]))
        elif sections:
            sections[-1][1].append(line)
        else:
            preamble.append(line)
    return preamble, sections


def document_view(
    store: DocumentStore,
    path: str,
    partitioner: ContentPartitioner,
    section: str | None = None,
) -> View:
    """
    A text document, one bookmark, with headings as jump sections.

    Headings are the lines starting with '#'; the n-th heading is the
    section key "s<n>". Each heading's text is partitioned on its own so
    a section always starts on a fresh page.

    Raises:
        KeyError: If section is not one of the document's headings.
    """
    text = store.read_file(path)
    preamble, headed = _split_headings(text) if text.strip() else ([], [])

    name = path.rsplit("/", 1)[-1]
    pages = [Page(title=name, body=body) for body in partitioner.partition(preamble)]
    builder = SectionIndexBuilder(base=len(pages))

    for number, (heading, lines) in enumerate(headed, 1):
        bodies = partitioner.partition(lines)
        builder.add(f"s{number}", len(bodies))
        pages.extend(Page(title=f"{name}: {heading}", body=body) for body in bodies)

    sections, total = builder.build()
    if section is not None and section not in sections:
        raise KeyError(f"Unknown section: {section}")

    bookmark = Bookmark("Text", pages_provider(pages), page_count=total)
    return View(bookmarks=[bookmark], sections=sections, start=section if section is not None else 0)


def _headline(title: str, files: list[Entry], partitioner: ContentPartitioner, renderer: MenuRenderer) -> Page:
    """One page naming a folder's files, truncated if they don't fit."""
    listing = partitioner.partition(renderer.lines(files))
    if not listing:
        return Page(title=title, body="(empty)")
    body = listing[0] if len(listing) == 1 else f"{listing[0]}\n(more...)"
    return Page(title=title, body=body)


def _preview(path: str, text: str, partitioner: ContentPartitioner) -> Page:
    """First page of a document, pointing at 'read' when there is more."""
    parts = partitioner.partition_text(text)
    if not parts:
        return Page(title=path, body="(empty file)")
    footer = f"read {path} for more" if len(parts) > 1 else None
    return Page(title=path, body=parts[0], footer=footer)


def guide_view(
    store: DocumentStore,
    path: str,
    partitioner: ContentPartitioner,
    section: str | None = None,
    renderer: MenuRenderer | None = None,
) -> View:
    """
    Directory guide: overview, one group per folder, then top-level files.

    Layout of the single "Guide" bookmark:
      - overview pages (GuideSection.OVERVIEW);
      - for every folder, a headline page listing its files followed by a
        preview page per file. The folder's lowercased name is its section
        key; folders whose names only differ in case share a key and the
        key jumps to the last of them;
        a folder named like a fixed section (overview, files) is still
        indexed under its name, but typing that name reaches the fixed
        section, the same as passing it as the start section;
      - one preview page per top-level file (GuideSection.FILES), starting
        at the final offset of the folder groups.

    Raises:
        KeyError: If section is not a folder name or fixed section.
    """
    renderer = renderer or MenuRenderer()
    entries = sort_entries(store.list_directory(path))
    folders = [e for e in entries if e.is_dir]
    files = [e for e in entries if not e.is_dir]

    groups: list[tuple[str, list[Entry]]] = []
    for folder in folders:
        folder_path = _join(path, folder.name)
        children = sort_entries(store.list_directory(folder_path))
        groups.append((folder_path, [c for c in children if not c.is_dir]))

    overview_lines = [f"{folder.name}/ ({len(children)} file(s))" for folder, (_, children) in zip(folders, groups)]
    overview_lines.append(f"{len(files)} top-level file(s)")
    pages = [Page(title=f"Guide {path}", body=body) for body in partitioner.partition(overview_lines)]

    index, files_offset = build_section_index(
        [(folder.name.lower(), len(children)) for folder, (_, children) in zip(folders, groups)],
        base=len(pages),
        group_extra=1,
        mode=GroupMode.REPEATED,
    )

    for folder_path, children in groups:
        pages.append(_headline(f"{folder_path}/", children, partitioner, renderer))
        for child in children:
            child_path = _join(folder_path, child.name)
            pages.append(_preview(child_path, store.read_file(child_path), partitioner))

    for entry in files:
        file_path = _join(path, entry.name)
        pages.append(_preview(file_path, store.read_file(file_path), partitioner))

    sections = SectionIndex()
    sections.assign(GuideSection.OVERVIEW, 0)
    for key, offset in index.items():
        sections.assign(key, offset)
    if files:
        sections.assign(GuideSection.FILES, files_offset)

    start: int | Hashable = 0
    if section is not None:
        start = _guide_key(section, sections)

    bookmark = Bookmark("Guide", pages_provider(pages), page_count=len(pages))
    return View(bookmarks=[bookmark], sections=sections, start=start)


def _guide_key(section: str, sections: SectionIndex) -> Hashable:
    for fixed in GuideSection:
        if fixed.value == section and fixed in sections:
            return fixed
    if section in sections:
        return section
    raise KeyError(f"Unknown section: {section}")
