from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Extensions whose content is serialized/deserialized as JSON.
STRUCTURED_EXTENSIONS: tuple[str, ...] = (".json",)

# Extensions that mark a directory entry as a document when listing.
DOCUMENT_EXTENSIONS: tuple[str, ...] = (".json", ".js")

HIDDEN_PREFIX = "."


class WriteOutcome(str, Enum):
    WRITTEN = "WRITTEN"
    # A file already sits at the path; nothing was written.
    ALREADY_EXISTS = "ALREADY_EXISTS"
    # Something other than a file (usually a directory) sits at the path.
    OCCUPIED = "OCCUPIED"

    @property
    def already_exists(self) -> bool:
        return self is not WriteOutcome.WRITTEN


class ProvisionOutcome(str, Enum):
    CREATED = "CREATED"
    EXISTED = "EXISTED"


class RemoveOutcome(str, Enum):
    REMOVED = "REMOVED"
    # Path was missing or was a special file; nothing was removed.
    ABSENT = "ABSENT"


class ReadStatus(str, Enum):
    """How the content returned by a read was interpreted."""

    DECODED = "DECODED"
    RAW = "RAW"
    DECODE_FAILED = "DECODE_FAILED"
    BINARY = "BINARY"


class Document(BaseModel):
    """The result of reading a document, including how it was decoded."""

    path: str
    value: Any = Field(description="Decoded JSON value, text, or raw bytes.")
    status: ReadStatus


class PathKind(str, Enum):
    FILE = "FILE"
    DIRECTORY = "DIRECTORY"
    OTHER = "OTHER"
    ABSENT = "ABSENT"


class PathStat(BaseModel):
    path: str
    kind: PathKind

    model_config = ConfigDict(frozen=True)

    @property
    def is_file(self) -> bool:
        return self.kind is PathKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is PathKind.DIRECTORY

    @property
    def exists(self) -> bool:
        return self.kind is not PathKind.ABSENT


def is_structured(path: str) -> bool:
    return path.endswith(STRUCTURED_EXTENSIONS)


def is_document_name(name: str) -> bool:
    return not name.startswith(HIDDEN_PREFIX) and name.endswith(DOCUMENT_EXTENSIONS)


def is_subdirectory_name(name: str) -> bool:
    return "." not in name
