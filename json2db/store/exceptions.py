class Json2DbError(Exception):
    """Base class for errors raised by json2db itself.

    Filesystem failures are never wrapped in this hierarchy; they reach
    callers as the builtin ``OSError`` subclasses with ``errno`` intact.
    """


class PathEscapesRootError(Json2DbError, ValueError):
    """Raised when a relative path resolves outside the store root."""

    path: str

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"path escapes store root: {path}")


class PathTooDeepError(Json2DbError, ValueError):
    """Raised when a path is nested deeper than the store allows.

    Provisioning and tree removal walk explicit stacks bounded by the
    store's ``max_depth``; this error is raised before anything on disk
    is touched.
    """

    path: str
    depth: int
    max_depth: int

    def __init__(self, path: str, depth: int, max_depth: int) -> None:
        self.path = path
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"path {path!r} is {depth} levels deep (max_depth={max_depth})"
        )


class InvalidFilterError(Json2DbError, ValueError):
    """Raised when a search filter is malformed."""
