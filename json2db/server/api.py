from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from json2db.logger import get_logger
from json2db.server.config import Config, get_default_config
from json2db.server.dependencies import (
    create_session_api_key_dependency,
    get_document_store,
)
from json2db.server.document_router import (
    directory_router,
    document_router,
    search_router,
)
from json2db.server.middleware import LocalhostCORSMiddleware
from json2db.store import Json2DbError, StoreEvent


logger = get_logger(__name__)


def log_store_event(event: StoreEvent) -> None:
    logger.debug(f"{event.kind.value} {event.path}")


@asynccontextmanager
async def api_lifespan(api: FastAPI) -> AsyncIterator[None]:
    store = api.dependency_overrides.get(get_document_store, get_document_store)()
    subscriber_id = store.subscribe(log_store_event)
    try:
        yield
    finally:
        store.unsubscribe(subscriber_id)


def _create_fastapi_instance() -> FastAPI:
    return FastAPI(
        title="json2db",
        description="json2db - REST interface to a filesystem-backed JSON store",
        lifespan=api_lifespan,
    )


def _add_api_routes(app: FastAPI, config: Config) -> None:
    """Add all API routes, guarded by the session API key when one is configured."""
    dependencies = [Depends(create_session_api_key_dependency(config))]
    for router in (document_router, directory_router, search_router):
        app.include_router(router, prefix="/api", dependencies=dependencies)


def _add_middleware(app: FastAPI, config: Config) -> None:
    app.add_middleware(LocalhostCORSMiddleware, allow_origins=config.allow_cors_origins)


def _error_response(request: Request, status_code: int, exc: Exception) -> JSONResponse:
    logger.info(
        "%s %d on %s %s: %s",
        type(exc).__name__,
        status_code,
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def _add_exception_handlers(api: FastAPI) -> None:
    """Map store failures onto HTTP responses.

    A missing path is a 404; an occupied path a 409; every other store or
    filesystem failure a 400. Anything else is logged with its traceback
    and reported as a bare 500.
    """

    @api.exception_handler(FileNotFoundError)
    async def _not_found_handler(request: Request, exc: FileNotFoundError):
        return _error_response(request, 404, exc)

    @api.exception_handler(FileExistsError)
    async def _exists_handler(request: Request, exc: FileExistsError):
        return _error_response(request, 409, exc)

    @api.exception_handler(OSError)
    async def _os_error_handler(request: Request, exc: OSError):
        return _error_response(request, 400, exc)

    @api.exception_handler(Json2DbError)
    async def _store_error_handler(request: Request, exc: Json2DbError):
        return _error_response(request, 400, exc)

    @api.exception_handler(HTTPException)
    async def _http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Handle HTTPExceptions with appropriate logging."""
        if 400 <= exc.status_code < 500:
            logger.info(
                "HTTPException %d on %s %s: %s",
                exc.status_code,
                request.method,
                request.url.path,
                exc.detail,
            )
        elif exc.status_code >= 500:
            logger.error(
                "HTTPException %d on %s %s: %s",
                exc.status_code,
                request.method,
                request.url.path,
                exc.detail,
                exc_info=True,
            )
            # Don't leak internal details to clients for 5xx errors
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": "Internal Server Error"},
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @api.exception_handler(Exception)
    async def _unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path
        )
        return JSONResponse(
            status_code=500, content={"detail": "Internal Server Error"}
        )


def create_app(config: Config | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration object. If None, uses default config.

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = get_default_config()
    app = _create_fastapi_instance()
    _add_api_routes(app, config)
    _add_middleware(app, config)
    _add_exception_handlers(app)

    return app


# Create the default app instance
api = create_app()
