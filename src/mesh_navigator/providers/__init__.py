"""Document store implementations."""

from .filesystem_store import FilesystemStore

__all__ = ["FilesystemStore"]
