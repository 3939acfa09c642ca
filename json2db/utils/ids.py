import posixpath
import uuid


def new_document_id() -> str:
    """Generate a time-based id for a document created without one."""
    return str(uuid.uuid1())


def document_id_from_path(path: str) -> str:
    """Return the id encoded in a document path: its file name up to the first dot."""
    return posixpath.basename(path).split(".")[0]
