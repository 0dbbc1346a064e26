"""Filesystem-backed document store."""

from pathlib import Path

from ..interfaces import DocumentStore, Entry


class FilesystemStore(DocumentStore):
    """Document store sandboxed to one directory tree.

    Virtual paths ("/docs/a.txt") are resolved below the root; anything
    that resolves outside it is rejected. Hidden entries are not listed.
    """

    def __init__(self, root_path: str | Path, encoding: str = "utf-8"):
        """
        Args:
            root_path: Directory holding the browsable documents.
            encoding: Text encoding of documents. Undecodable bytes are replaced.

        Raises:
            ValueError: If root_path is not a directory.
        """
        self.root = Path(root_path).resolve()
        self.encoding = encoding
        if not self.root.is_dir():
            raise ValueError(f"Root path must be a directory: {root_path}")

    def _resolve_path(self, path: str) -> Path:
        """
        Map a virtual path onto the filesystem.

        Raises:
            ValueError: If the path escapes the root directory.
        """
        relative = path.strip("/")
        if not relative:
            return self.root

        resolved = (self.root / relative).resolve()
        if not resolved.is_relative_to(self.root):
            raise ValueError(f"Path escapes root directory: {path}")
        return resolved

    def list_directory(self, path: str) -> list[Entry]:
        """
        List visible entries of a directory, in filesystem order.

        Raises:
            FileNotFoundError: If the directory doesn't exist.
            NotADirectoryError: If the path is a file.
        """
        directory = self._resolve_path(path)

        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {path}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")

        return [
            Entry(name=item.name, is_dir=item.is_dir())
            for item in directory.iterdir()
            if not item.name.startswith(".")
        ]

    def read_file(self, path: str) -> str:
        """
        Read a document as text.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            IsADirectoryError: If the path is a directory.
        """
        document = self._resolve_path(path)

        if not document.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if document.is_dir():
            raise IsADirectoryError(f"Is a directory: {path}")

        return document.read_text(encoding=self.encoding, errors="replace")

    def exists(self, path: str) -> bool:
        """Check if a virtual path exists inside the root."""
        try:
            return self._resolve_path(path).exists()
        except ValueError:
            return False

    def is_directory(self, path: str) -> bool:
        """Check if a virtual path is a directory inside the root."""
        try:
            return self._resolve_path(path).is_dir()
        except ValueError:
            return False
