from fastapi import APIRouter, Depends
from app.core.errors import WorkspaceError, to_http_exception
from app.core.security import get_principal
from app.models.client import (
    ClientCreate, ClientUpdate, ClientProfile, ClientCreatedResponse, StructureResponse
)
from app.models.user import Principal
from app.services.workspace import WorkspaceService, get_workspace

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("")
def list_clients(
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    return {"clients": ops.list_clients(principal)}


@router.post("", response_model=ClientCreatedResponse)
def create_client(
    data: ClientCreate,
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        client_id, changes = ops.create_client(principal, data.name, data.type, data.flags)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return ClientCreatedResponse(id=client_id, created=changes.created)


@router.get("/{client_id}", response_model=ClientProfile)
def get_client(
    client_id: str,
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return ops.get_client(principal, client_id)
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.put("/{client_id}", response_model=StructureResponse)
def update_client(
    client_id: str,
    data: ClientUpdate,
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        changes = ops.update_client(principal, client_id, data.type, data.flags)
        profile = ops.get_client(principal, client_id)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return StructureResponse(
        id=client_id,
        created=changes.created,
        removed=changes.removed,
        profile=profile,
    )
