from importlib.metadata import PackageNotFoundError, version

from json2db.logger import get_logger
from json2db.pub_sub import NotificationBus, Subscriber, get_default_bus
from json2db.store import (
    Document,
    DocumentStore,
    EventKind,
    InvalidFilterError,
    Json2DbError,
    LocalDocumentStore,
    PathEscapesRootError,
    PathKind,
    PathStat,
    PathTooDeepError,
    ProvisionOutcome,
    ReadStatus,
    RemoveOutcome,
    StoreEvent,
    WriteOutcome,
)


try:
    __version__ = version("json2db")
except PackageNotFoundError:
    __version__ = "0.0.0"  # fallback for editable/unbuilt environments

__all__ = [
    "DocumentStore",
    "LocalDocumentStore",
    "NotificationBus",
    "Subscriber",
    "get_default_bus",
    "StoreEvent",
    "EventKind",
    "Document",
    "ReadStatus",
    "PathStat",
    "PathKind",
    "WriteOutcome",
    "ProvisionOutcome",
    "RemoveOutcome",
    "Json2DbError",
    "InvalidFilterError",
    "PathEscapesRootError",
    "PathTooDeepError",
    "get_logger",
    "__version__",
]
