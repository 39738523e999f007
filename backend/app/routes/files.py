from typing import List
from fastapi import APIRouter, Depends, UploadFile, File, Query
from fastapi.responses import FileResponse
from app.core.errors import WorkspaceError, to_http_exception
from app.core.security import get_principal
from app.models.item import (
    ItemResponse, FolderCreate, TextFileCreate, Base64Upload, WrittenFileResponse
)
from app.models.user import Principal
from app.services.workspace import WorkspaceService, get_workspace
from app.utils import decode_base64_payload

router = APIRouter(prefix="/clients/{client_id}", tags=["files"])


@router.get("/files", response_model=List[ItemResponse])
def list_files(
    client_id: str,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return ops.list_items(principal, client_id, path)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.post("/upload", response_model=WrittenFileResponse)
def upload_file(
    client_id: str,
    path: str = Query(""),
    file: UploadFile = File(...),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    # one byte past the limit is enough to reject oversize uploads
    data = file.file.read(ops.max_upload_bytes + 1)
    try:
        return ops.upload(principal, client_id, path, file.filename, data)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.post("/uploadBase64", response_model=WrittenFileResponse)
def upload_base64(
    client_id: str,
    data: Base64Upload,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        content = decode_base64_payload(data.base64)
        return ops.upload(principal, client_id, path, data.fileName, content)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.get("/download")
def download_file(
    client_id: str,
    path: str = Query(""),
    file: str = Query(...),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        target = ops.download(principal, client_id, path, file)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return FileResponse(str(target), filename=target.name)


@router.post("/mkdir")
def make_folder(
    client_id: str,
    data: FolderCreate,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return ops.make_folder(principal, client_id, path, data.name)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.post("/writeText", response_model=WrittenFileResponse)
def write_text(
    client_id: str,
    data: TextFileCreate,
    path: str = Query(""),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return ops.write_text(principal, client_id, path, data.fileName, data.text)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.delete("/file")
def delete_file(
    client_id: str,
    path: str = Query(""),
    file: str = Query(...),
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    """Soft delete: the entry is moved into the workspace trash."""
    try:
        record = ops.move_to_trash(principal, client_id, path, file)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return {
        "message": "Moved to trash",
        "trash_name": record.trash_name,
        "original_path": record.original_path,
    }
