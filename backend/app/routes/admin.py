import uuid
import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends
from app.core.database import db
from app.core.errors import WorkspaceError, InvalidInput, to_http_exception
from app.core.security import get_admin_user, hash_password
from app.models.user import UserCreate, UserResponse
from app.routes.auth import _user_response
from app.services.paths import validate_entry_name
from app.services.workspace import WorkspaceService, get_workspace
from app.utils import utc_now_iso

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def _check_client_binding(data: UserCreate, ops: WorkspaceService):
    """Client accounts must point at an existing workspace; roots are top-level folder names."""
    if data.role == "admin":
        return
    if not data.client_id:
        raise InvalidInput("client_id is required for client users")
    ops.registry.workspace_root(data.client_id)
    for folder in list(data.allowed_roots or []) + list(data.permissions):
        validate_entry_name(folder)


@router.get("/users", response_model=List[UserResponse])
async def list_users(admin=Depends(get_admin_user)):
    users = await db.users.find({}, {"_id": 0, "password": 0}).to_list(1000)
    return [_user_response(u) for u in users]


@router.post("/users", response_model=UserResponse)
async def create_user(
    data: UserCreate,
    admin=Depends(get_admin_user),
    ops: WorkspaceService = Depends(get_workspace),
):
    existing = await db.users.find_one({"email": data.email})
    if existing:
        raise HTTPException(status_code=400, detail="Email already exists")

    try:
        _check_client_binding(data, ops)
    except WorkspaceError as e:
        raise to_http_exception(e)

    user_doc = {
        "id": str(uuid.uuid4()),
        "email": data.email,
        "password": hash_password(data.password),
        "name": data.name,
        "role": data.role,
        "client_id": data.client_id if data.role == "client" else None,
        "allowed_roots": data.allowed_roots if data.role == "client" else None,
        "permissions": {k: v.model_dump() for k, v in data.permissions.items()} if data.role == "client" else {},
        "created_at": utc_now_iso(),
    }
    await db.users.insert_one(user_doc)
    logger.info(f"Admin {admin['id']} created {data.role} user {user_doc['id']}")

    return _user_response(user_doc)


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, admin=Depends(get_admin_user)):
    if user_id == admin["id"]:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")

    result = await db.users.delete_one({"id": user_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"Admin {admin['id']} deleted user {user_id}")
    return {"message": "User deleted"}
