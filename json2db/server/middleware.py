from urllib.parse import urlparse

from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp


LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class LocalhostCORSMiddleware(CORSMiddleware):
    """CORS for the document API.

    With no configured origins only pages served from a loopback host may
    call the API. Any request header is accepted so browsers can send the
    ``X-Set-Id`` and ``X-Rename`` style document headers.
    """

    def __init__(self, app: ASGIApp, allow_origins: list[str]) -> None:
        super().__init__(
            app,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _is_loopback(self, origin: str) -> bool:
        return (urlparse(origin).hostname or "") in LOOPBACK_HOSTS

    def is_allowed_origin(self, origin: str) -> bool:
        if not self.allow_origins and not self.allow_origin_regex:
            return bool(origin) and self._is_loopback(origin)
        return super().is_allowed_origin(origin)
