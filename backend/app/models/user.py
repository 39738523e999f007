from pydantic import BaseModel, EmailStr
from typing import Dict, List, Literal, Optional


class FolderPermissions(BaseModel):
    can_upload: bool = True
    can_delete: bool = True
    can_mkdir: bool = True
    can_write_text: bool = True


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str
    role: Literal["admin", "client"] = "client"
    client_id: Optional[str] = None
    allowed_roots: Optional[List[str]] = None
    permissions: Dict[str, FolderPermissions] = {}


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    client_id: Optional[str] = None
    allowed_roots: Optional[List[str]] = None
    permissions: Dict[str, FolderPermissions] = {}
    created_at: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class Principal(BaseModel):
    """The authenticated caller, as handed to every workspace operation."""
    user_id: str
    role: Literal["admin", "client"]
    client_id: Optional[str] = None
    # None = every top-level folder of the workspace
    allowed_roots: Optional[List[str]] = None
    # keyed by top-level folder name; missing keys get full permissions
    permissions: Dict[str, FolderPermissions] = {}

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
