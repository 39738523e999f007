"""
Workspace error taxonomy.
Every error carries the offending path relative to the workspace (never an
absolute host path) so the HTTP layer can render it as-is.
"""
from contextlib import contextmanager

from fastapi import HTTPException


class WorkspaceError(Exception):
    status_code = 400
    kind = "workspace_error"

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.message = message
        self.path = path

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "path": self.path}


class InvalidPath(WorkspaceError):
    kind = "invalid_path"


class InvalidInput(WorkspaceError):
    kind = "invalid_input"


class NotFound(WorkspaceError):
    status_code = 404
    kind = "not_found"


class NotAFile(WorkspaceError):
    kind = "not_a_file"


class NotADirectory(WorkspaceError):
    kind = "not_a_directory"


class AlreadyExists(WorkspaceError):
    status_code = 409
    kind = "already_exists"


class PayloadTooLarge(WorkspaceError):
    status_code = 413
    kind = "payload_too_large"


class PermissionDenied(WorkspaceError):
    status_code = 403
    kind = "permission_denied"


class StorageIOError(WorkspaceError):
    status_code = 500
    kind = "io_error"


class CrossDeviceMoveError(StorageIOError):
    """A copy+delete move between devices failed and may have left partial state."""
    kind = "cross_device_move"


@contextmanager
def surface_io_errors(rel_path: str):
    """Re-raise OSError as StorageIOError tagged with the relative path."""
    try:
        yield
    except WorkspaceError:
        raise
    except OSError as e:
        raise StorageIOError(e.strerror or e.__class__.__name__, rel_path) from e


def to_http_exception(err: WorkspaceError) -> HTTPException:
    return HTTPException(status_code=err.status_code, detail=err.to_dict())
