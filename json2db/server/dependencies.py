from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from json2db.logger import get_logger
from json2db.server.config import Config, get_default_config
from json2db.store import DocumentStore, LocalDocumentStore


logger = get_logger(__name__)

_SESSION_API_KEY_HEADER = APIKeyHeader(name="X-Session-API-Key", auto_error=False)

_default_store: DocumentStore | None = None


def create_session_api_key_dependency(config: Config):
    """Create a session API key dependency with the given config."""

    def check_session_api_key(
        session_api_key: str | None = Depends(_SESSION_API_KEY_HEADER),
    ):
        """Check the session API key and throw an exception if incorrect. Having this as
        a dependency means it appears in OpenAPI Docs
        """
        if config.session_api_keys and session_api_key not in config.session_api_keys:
            raise HTTPException(status.HTTP_401_UNAUTHORIZED)

    return check_session_api_key


def create_document_store(config: Config) -> DocumentStore:
    store = LocalDocumentStore(config.root_path, max_depth=config.max_depth)
    logger.info(f"Serving documents from {store.root}")
    return store


def get_document_store() -> DocumentStore:
    """Return the store shared by every request, creating it on first use."""
    global _default_store
    if _default_store is None:
        _default_store = create_document_store(get_default_config())
    return _default_store


def get_config() -> Config:
    return get_default_config()
