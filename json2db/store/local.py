from __future__ import annotations

import asyncio
import json
import os
import posixpath
import stat as stat_module
from functools import partial
from typing import Any, Callable, TypeVar
from uuid import UUID

from json2db.logger import get_logger
from json2db.pub_sub import EventKind, NotificationBus, Subscriber, get_default_bus
from json2db.store.base import DocumentStore
from json2db.store.exceptions import PathEscapesRootError, PathTooDeepError
from json2db.store.types import (
    Document,
    PathKind,
    PathStat,
    ProvisionOutcome,
    ReadStatus,
    RemoveOutcome,
    WriteOutcome,
    is_document_name,
    is_structured,
    is_subdirectory_name,
)


logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_DEPTH = 64
JSON_INDENT = 2


def _read_bytes(full_path: str) -> bytes:
    with open(full_path, "rb") as f:
        return f.read()


def _write_bytes(full_path: str, data: bytes) -> None:
    # Truncate-then-write: a concurrent reader can observe a partial file.
    with open(full_path, "wb") as f:
        f.write(data)


def _is_directory(full_path: str) -> bool:
    return os.path.isdir(full_path)


def _is_symlink(full_path: str) -> bool:
    return os.path.islink(full_path)


def _scan(full_path: str) -> list[tuple[str, PathKind]]:
    """Classify directory entries without following symlinks."""
    entries = []
    with os.scandir(full_path) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                kind = PathKind.DIRECTORY
            elif entry.is_file(follow_symlinks=False) or entry.is_symlink():
                kind = PathKind.FILE
            else:
                kind = PathKind.OTHER
            entries.append((entry.name, kind))
    return entries


def serialize(path: str, value: Any) -> bytes:
    """Serialize ``value`` the way it is stored on disk for ``path``."""
    if is_structured(path):
        return json.dumps(value, indent=JSON_INDENT, ensure_ascii=False).encode(
            "utf-8"
        )
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(
        f"raw document {path!r} needs str or bytes content, "
        f"got {type(value).__name__}"
    )


def deserialize(path: str, data: bytes) -> Document:
    """Decode stored bytes, falling back to text when JSON does not parse."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return Document(path=path, value=data, status=ReadStatus.BINARY)
    if not is_structured(path):
        return Document(path=path, value=text, status=ReadStatus.RAW)
    try:
        return Document(path=path, value=json.loads(text), status=ReadStatus.DECODED)
    except json.JSONDecodeError:
        return Document(path=path, value=text, status=ReadStatus.DECODE_FAILED)


class LocalDocumentStore(DocumentStore):
    """Document store backed by a directory on the local filesystem.

    The directory tree under ``root`` is the whole namespace: there is no
    index or manifest. Blocking filesystem calls run in the default
    executor; notifications are delivered on the event loop thread.

    Writers to the same path are not serialized. The last write to
    complete wins and no conflict is reported.
    """

    root: str
    max_depth: int
    notifications: NotificationBus

    def __init__(
        self,
        root: str | os.PathLike[str] | None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        notifications: NotificationBus | None = None,
    ):
        if root is None or not os.fspath(root):
            raise ValueError("The `root` parameter is missing.")
        root = os.fspath(root)
        if root.startswith("~"):
            root = os.path.expanduser(root)
        root = os.path.abspath(os.path.normpath(root))
        self.root = root
        self.max_depth = max_depth
        self.notifications = (
            notifications if notifications is not None else get_default_bus()
        )
        os.makedirs(self.root, exist_ok=True)

    def get_full_path(self, path: str) -> str:
        # strip leading slash to keep relative under root
        path = path.lstrip("/")
        # normalize path separators to handle both Unix (/) and Windows (\) styles
        normalized_path = path.replace("\\", "/")
        full = os.path.abspath(
            os.path.normpath(os.path.join(self.root, normalized_path))
        )
        # ensure sandboxing
        if os.path.commonpath([self.root, full]) != self.root:
            raise PathEscapesRootError(path)
        return full

    def get_relative_path(self, path: str) -> str:
        """Return the normalized root-relative form of ``path`` ('' for the root)."""
        relative = os.path.relpath(self.get_full_path(path), self.root)
        if relative == os.curdir:
            return ""
        return relative.replace(os.sep, "/")

    def _check_depth(self, relative: str) -> None:
        depth = len([part for part in relative.split("/") if part])
        if depth > self.max_depth:
            raise PathTooDeepError(relative, depth, self.max_depth)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args))

    def subscribe(
        self,
        callback: Subscriber,
        kinds: EventKind | list[EventKind] | None = None,
    ) -> UUID:
        return self.notifications.subscribe(callback, kinds)

    def unsubscribe(self, subscriber_id: UUID) -> bool:
        return self.notifications.unsubscribe(subscriber_id)

    async def list(self, path: str) -> list[str]:
        entries = await self._run(os.listdir, self.get_full_path(path))
        return [name for name in entries if is_document_name(name)]

    async def list_subdirectories(self, path: str) -> list[str]:
        entries = await self._run(os.listdir, self.get_full_path(path))
        return [name for name in entries if is_subdirectory_name(name)]

    async def read_document(self, path: str) -> Document:
        data = await self._run(_read_bytes, self.get_full_path(path))
        document = deserialize(path, data)
        if document.status is ReadStatus.DECODE_FAILED:
            logger.debug(f"Returning {path} as text, content is not valid JSON")
        self.notifications.publish(EventKind.READ, path, document.value)
        return document

    async def write(self, path: str, value: Any) -> WriteOutcome:
        full_path = self.get_full_path(path)
        self.notifications.publish(EventKind.WRITE, path, value)
        data = serialize(path, value)
        await self._run(_write_bytes, full_path, data)
        logger.debug(f"Wrote {len(data)} bytes to {full_path}")
        return WriteOutcome.WRITTEN

    async def write_if_absent(self, path: str, value: Any = None) -> WriteOutcome:
        if value is None:
            value = {} if is_structured(path) else ""
        relative = self.get_relative_path(path)
        await self.provision(posixpath.dirname(relative))
        existing = await self.stat(path)
        if not existing.exists:
            return await self.write(path, value)
        if existing.is_file:
            return WriteOutcome.ALREADY_EXISTS
        logger.debug(f"Not writing {path}: occupied by {existing.kind.value.lower()}")
        return WriteOutcome.OCCUPIED

    async def rename(self, old_path: str, new_path: str) -> None:
        # Rename is not published to subscribers.
        await self._run(
            os.rename, self.get_full_path(old_path), self.get_full_path(new_path)
        )
        logger.debug(f"Renamed {old_path} to {new_path}")

    async def delete(self, path: str) -> None:
        full_path = self.get_full_path(path)
        self.notifications.publish(EventKind.DELETE, path)
        await self._run(os.unlink, full_path)
        logger.debug(f"Removed local file: {full_path}")

    async def stat(self, path: str) -> PathStat:
        try:
            result = await self._run(os.stat, self.get_full_path(path))
        except FileNotFoundError:
            return PathStat(path=path, kind=PathKind.ABSENT)
        if stat_module.S_ISREG(result.st_mode):
            kind = PathKind.FILE
        elif stat_module.S_ISDIR(result.st_mode):
            kind = PathKind.DIRECTORY
        else:
            kind = PathKind.OTHER
        return PathStat(path=path, kind=kind)

    async def make_directory(self, path: str) -> None:
        await self._run(os.mkdir, self.get_full_path(path))

    async def remove_directory(self, path: str) -> None:
        await self._run(os.rmdir, self.get_full_path(path))

    async def provision(self, path: str) -> ProvisionOutcome:
        """Create ``path`` and any missing ancestors.

        Each directory is created with a plain ``mkdir``. A missing parent
        pushes the parent onto the stack and the child is retried once the
        parent exists. Any other failure is accepted only if a directory
        is now at that path, which is what a concurrent provisioner
        leaves behind; otherwise the original error is raised.
        """
        target = self.get_relative_path(path)
        self._check_depth(target)

        outcome = ProvisionOutcome.CREATED
        pending = [target]
        while pending:
            current = pending[-1]
            full_path = self.get_full_path(current)
            try:
                await self._run(os.mkdir, full_path)
                logger.debug(f"Created directory: {full_path}")
            except FileNotFoundError:
                if not current:
                    # the store root itself has gone missing
                    raise
                pending.append(posixpath.dirname(current))
                continue
            except OSError:
                if not await self._run(_is_directory, full_path):
                    raise
                if current == target:
                    outcome = ProvisionOutcome.EXISTED
            pending.pop()
        return outcome

    async def _collect_tree(self, top: str) -> tuple[list[str], list[str]]:
        """Walk ``top`` and return its files and its directories, parents first."""
        files: list[str] = []
        directories: list[str] = []
        stack = [top]
        while stack:
            current = stack.pop()
            self._check_depth(current)
            directories.append(current)
            for name, kind in await self._run(_scan, self.get_full_path(current)):
                child = posixpath.join(current, name) if current else name
                if kind is PathKind.DIRECTORY:
                    stack.append(child)
                elif kind is PathKind.FILE:
                    files.append(child)
        return files, directories

    async def remove_tree(self, path: str) -> RemoveOutcome:
        """Delete a file or a whole directory tree.

        The tree is fully enumerated (and its depth checked) before
        anything is deleted. Files are then unlinked concurrently and the
        directories removed children before parents. Entries that are
        neither files, symlinks nor directories are left alone, so their
        parent directory fails to be removed. If any removal fails the error
        propagates and the tree may be left partially deleted.
        """
        relative = self.get_relative_path(path)
        if relative and await self._run(_is_symlink, self.get_full_path(relative)):
            await self.delete(relative)
            return RemoveOutcome.REMOVED
        existing = await self.stat(relative)
        if existing.is_file:
            await self.delete(relative)
            return RemoveOutcome.REMOVED
        if not existing.is_directory:
            return RemoveOutcome.ABSENT

        files, directories = await self._collect_tree(relative)
        await asyncio.gather(*(self.delete(file_path) for file_path in files))
        for directory in reversed(directories):
            if directory:
                # the store root is emptied, never removed
                await self.remove_directory(directory)
        logger.debug(
            f"Removed tree {relative or '/'}: "
            f"{len(files)} files, {len(directories)} directories"
        )
        return RemoveOutcome.REMOVED
