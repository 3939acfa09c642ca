from json2db.pub_sub import EventKind, StoreEvent
from json2db.store.base import DocumentStore
from json2db.store.exceptions import (
    InvalidFilterError,
    Json2DbError,
    PathEscapesRootError,
    PathTooDeepError,
)
from json2db.store.local import LocalDocumentStore
from json2db.store.types import (
    Document,
    PathKind,
    PathStat,
    ProvisionOutcome,
    ReadStatus,
    RemoveOutcome,
    WriteOutcome,
)


__all__ = [
    "DocumentStore",
    "LocalDocumentStore",
    "Document",
    "EventKind",
    "PathKind",
    "PathStat",
    "ProvisionOutcome",
    "ReadStatus",
    "RemoveOutcome",
    "StoreEvent",
    "WriteOutcome",
    "Json2DbError",
    "InvalidFilterError",
    "PathEscapesRootError",
    "PathTooDeepError",
]
