"""Routes mapping HTTP verbs and URL segments onto document store operations."""

import asyncio
import posixpath
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from json2db.logger import get_logger
from json2db.server.config import Config
from json2db.server.dependencies import get_config, get_document_store
from json2db.server.models import SearchRequest, SearchResponse, Success
from json2db.store import DocumentStore, ReadStatus
from json2db.store.types import is_structured
from json2db.utils import deep_merge, document_id_from_path, matches, new_document_id


logger = get_logger(__name__)

document_router = APIRouter(prefix="/documents", tags=["Documents"])
directory_router = APIRouter(prefix="/directories", tags=["Directories"])
search_router = APIRouter(prefix="/search", tags=["Search"])

StoreDep = Annotated[DocumentStore, Depends(get_document_store)]
ConfigDep = Annotated[Config, Depends(get_config)]


def _content_for(path: str, body: Any) -> Any:
    """Validate a request body against the kind of document at ``path``."""
    if is_structured(path) or isinstance(body, str):
        return body
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Document {path} is not JSON; its content must be a string.",
    )


# Listing routes are registered before the catch-all document routes so
# that ".../list" is not read as a document path.


@document_router.get("")
async def list_root_documents(store: StoreDep) -> list[str]:
    """List the documents stored directly under the root."""
    return await store.list("")


@document_router.get("/dirs")
async def list_root_directories(store: StoreDep) -> list[str]:
    """List the collections directly under the root."""
    return await store.list_subdirectories("")


@document_router.get("/{dir_path:path}/list")
async def list_documents(dir_path: str, store: StoreDep) -> list[str]:
    """List the documents of a collection."""
    return await store.list(dir_path)


@document_router.get("/{dir_path:path}/listdir")
async def list_directories(dir_path: str, store: StoreDep) -> list[str]:
    """List the sub-collections of a collection."""
    return await store.list_subdirectories(dir_path)


@document_router.get("/{doc_path:path}")
async def read_document(doc_path: str, store: StoreDep) -> Response:
    """Read a document: JSON documents as JSON, anything else as text."""
    document = await store.read_document(doc_path)
    if document.status is ReadStatus.DECODED:
        return JSONResponse(content=document.value)
    if document.status is ReadStatus.BINARY:
        return Response(content=document.value, media_type="application/octet-stream")
    return PlainTextResponse(content=document.value)


@document_router.post("/{dir_path:path}", status_code=status.HTTP_201_CREATED)
async def create_document(
    dir_path: str,
    store: StoreDep,
    config: ConfigDep,
    body: Annotated[Any, Body()] = None,
    x_set_id: Annotated[str | None, Header()] = None,
    x_file_extension: Annotated[str | None, Header()] = None,
    x_complete_record: Annotated[str | None, Header()] = None,
) -> Any:
    """Create a document in a collection, creating the collection if needed.

    Returns the new id, or the stored record with its id when
    ``X-Complete-Record: 1`` is sent.
    """
    document_id = x_set_id or new_document_id()
    extension = (x_file_extension or config.default_extension).lstrip(".")
    path = posixpath.join(dir_path, f"{document_id}.{extension}")
    content = _content_for(path, body if body is not None else {})

    outcome = await store.write_if_absent(path, content)
    if outcome.already_exists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Document {document_id} already exists",
        )
    logger.info(f"Created document {path}")

    if x_complete_record == "1":
        record = content if isinstance(content, dict) else {"value": content}
        return {"id": document_id, **record}
    return document_id


@document_router.patch("/{doc_path:path}")
async def update_document(
    doc_path: str,
    store: StoreDep,
    body: Annotated[Any, Body()] = None,
    x_rename: Annotated[str | None, Header()] = None,
) -> Success:
    """Deep-merge the body into a document, or rename it with ``X-Rename``."""
    if x_rename:
        extension = posixpath.basename(doc_path).split(".")[-1]
        new_path = posixpath.join(posixpath.dirname(doc_path), f"{x_rename}.{extension}")
        await store.rename(doc_path, new_path)
        return Success()

    current = await store.read(doc_path)
    await store.write(doc_path, _content_for(doc_path, deep_merge(current, body or {})))
    return Success()


@document_router.put("/{doc_path:path}")
async def replace_document(
    doc_path: str,
    store: StoreDep,
    body: Annotated[Any, Body()] = None,
) -> Success:
    """Replace the complete content of a document."""
    await store.write(doc_path, _content_for(doc_path, body))
    return Success()


@document_router.delete("/{doc_path:path}")
async def delete_document(doc_path: str, store: StoreDep) -> Success:
    await store.delete(doc_path)
    return Success()


@directory_router.post("/{dir_path:path}", status_code=status.HTTP_201_CREATED)
async def create_directory(
    dir_path: str,
    store: StoreDep,
    parents: Annotated[
        bool, Query(description="Create missing ancestors as well.")
    ] = False,
) -> Success:
    if parents:
        await store.provision(dir_path)
    else:
        await store.make_directory(dir_path)
    return Success()


@directory_router.delete("/{dir_path:path}")
async def delete_directory(
    dir_path: str,
    store: StoreDep,
    recursive: Annotated[
        bool, Query(description="Remove the directory and everything below it.")
    ] = False,
) -> Success:
    if recursive:
        await store.remove_tree(dir_path)
    else:
        await store.remove_directory(dir_path)
    return Success()


def _document_file_name(raw_id: Any) -> str:
    document_id = str(raw_id)
    if not document_id.endswith(".json"):
        document_id = f"{document_id.split('.')[0]}.json"
    return document_id


async def _read_or_none(store: DocumentStore, path: str) -> Any:
    try:
        return await store.read(path)
    except FileNotFoundError:
        return None


@search_router.post("/{dir_path:path}")
async def search_documents(
    dir_path: str,
    request: SearchRequest,
    store: StoreDep,
    config: ConfigDep,
) -> SearchResponse:
    """Return the documents among ``ids`` that satisfy ``filter``.

    ``total`` counts every match; ``output`` holds at most ``count`` of
    them, each with ``id`` filled in from its file name when missing.
    """
    if request.ids is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="There must be an ids array.",
        )
    count = request.count if request.count is not None else config.search_default_count

    paths = [posixpath.join(dir_path, _document_file_name(i)) for i in request.ids]
    values = await asyncio.gather(*(_read_or_none(store, path) for path in paths))
    found = [
        (path, value)
        for path, value in zip(paths, values)
        if value is not None and matches(value, request.filter)
    ]

    output = []
    for path, value in found[:count]:
        if isinstance(value, dict) and not (
            isinstance(value.get("id"), str) and value["id"]
        ):
            value = {**value, "id": document_id_from_path(path)}
        output.append(value)
    return SearchResponse(total=len(found), output=output)
