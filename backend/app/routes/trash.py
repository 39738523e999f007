from typing import List
from fastapi import APIRouter, Depends, Query
from app.core.errors import WorkspaceError, to_http_exception
from app.core.security import get_principal
from app.models.item import TrashItemResponse, TrashRestore
from app.models.user import Principal
from app.services.workspace import WorkspaceService, get_workspace

router = APIRouter(prefix="/clients/{client_id}/trash", tags=["trash"])


@router.get("", response_model=List[TrashItemResponse])
def list_trash(
    client_id: str,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return ops.list_trash(principal, client_id, path)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.post("/restore")
def restore_item(
    client_id: str,
    data: TrashRestore,
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        restored = ops.restore(principal, client_id, data.path, data.name)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return {"message": "Restored", "path": restored}


@router.delete("/item")
def purge_item(
    client_id: str,
    name: str = Query(...),
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    """Permanently delete one trash entry."""
    try:
        ops.purge(principal, client_id, path, name)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return {"message": "Permanently deleted"}


@router.delete("")
def empty_trash(
    client_id: str,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        removed = ops.empty_trash(principal, client_id, path)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return {"message": "Trash emptied", "removed": removed}
