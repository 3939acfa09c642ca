from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from json2db.pub_sub import EventKind, Subscriber
from json2db.store.types import (
    Document,
    PathStat,
    ProvisionOutcome,
    RemoveOutcome,
    WriteOutcome,
)


class DocumentStore(ABC):
    """Abstract base class for hierarchical document stores.

    Documents and directories are addressed by paths relative to the
    store root. Paths ending in a structured extension hold JSON values;
    everything else is stored as opaque text or bytes.
    """

    @abstractmethod
    async def list(self, path: str) -> list[str]:
        """List the document names directly inside a directory.

        Args:
            path: The directory path to list.

        Returns:
            Non-hidden entry names carrying a document extension.
        """

    @abstractmethod
    async def list_subdirectories(self, path: str) -> list[str]:
        """List entry names without an extension, taken to be subdirectories.

        Args:
            path: The directory path to list.
        """

    @abstractmethod
    async def read_document(self, path: str) -> Document:
        """Read a document and report how its content was interpreted.

        Args:
            path: The document path to read.
        """

    async def read(self, path: str) -> Any:
        """Read a document and return its decoded value or raw text."""
        return (await self.read_document(path)).value

    @abstractmethod
    async def write(self, path: str, value: Any) -> WriteOutcome:
        """Create or overwrite a document. The parent directory must exist.

        Args:
            path: The document path to write.
            value: A JSON-serializable value for structured paths, or
                ``str``/``bytes`` for anything else.
        """

    @abstractmethod
    async def write_if_absent(self, path: str, value: Any = None) -> WriteOutcome:
        """Create a document only if nothing sits at ``path`` yet.

        The parent directory is provisioned first. Without a ``value`` a
        JSON document starts as an empty object and a raw document as
        empty text.
        """

    @abstractmethod
    async def rename(self, old_path: str, new_path: str) -> None:
        """Move a document or directory to a new path within the store."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete exactly one file."""

    @abstractmethod
    async def remove_tree(self, path: str) -> RemoveOutcome:
        """Delete a file, or a directory together with everything below it."""

    @abstractmethod
    async def provision(self, path: str) -> ProvisionOutcome:
        """Ensure a directory and all of its ancestors exist."""

    @abstractmethod
    async def make_directory(self, path: str) -> None:
        """Create exactly one directory. Its parent must already exist."""

    @abstractmethod
    async def remove_directory(self, path: str) -> None:
        """Remove exactly one empty directory."""

    @abstractmethod
    async def stat(self, path: str) -> PathStat:
        """Report whether ``path`` is a file, a directory, something else or absent."""

    @abstractmethod
    def subscribe(
        self,
        callback: Subscriber,
        kinds: EventKind | list[EventKind] | None = None,
    ) -> UUID:
        """Register a listener for read/write/delete notifications."""

    @abstractmethod
    def unsubscribe(self, subscriber_id: UUID) -> bool:
        """Remove a listener registered with ``subscribe``."""
