"""
Shared access-control helpers for workspace operations.
Admins can do everything. A client principal is bound to one workspace,
optionally restricted to some top-level folders, each with its own
upload/delete/mkdir/write-text switches.
"""
import logging
from typing import List, Optional

from app.core.errors import PermissionDenied
from app.models.user import FolderPermissions, Principal
from app.services.paths import normalize_rel_path

logger = logging.getLogger(__name__)

CAPABILITIES = ("can_upload", "can_delete", "can_mkdir", "can_write_text")
FULL_ACCESS = FolderPermissions()


def top_level_folder(rel_path) -> str:
    return normalize_rel_path(rel_path).partition("/")[0]


def can_user_access_workspace(principal: Principal, client_id: str) -> bool:
    if principal.is_admin:
        return True
    return bool(principal.client_id) and principal.client_id == client_id


def can_user_access_folder(principal: Principal, rel_path) -> bool:
    """The workspace root is always visible; below it, only allowed roots."""
    if principal.is_admin or principal.allowed_roots is None:
        return True
    top = top_level_folder(rel_path)
    return top == "" or top in principal.allowed_roots


def folder_permissions(principal: Principal, rel_path) -> Optional[FolderPermissions]:
    """Capabilities for rel_path, or None when the folder is not visible at all."""
    if principal.is_admin:
        return FULL_ACCESS
    if not can_user_access_folder(principal, rel_path):
        return None
    return principal.permissions.get(top_level_folder(rel_path), FULL_ACCESS)


def require_workspace(principal: Principal, client_id: str):
    if not can_user_access_workspace(principal, client_id):
        logger.warning(f"Workspace access denied: user={principal.user_id} client={client_id}")
        raise PermissionDenied("No access to this client", "")


def require_folder(principal: Principal, client_id: str, rel_path, capability: Optional[str] = None):
    """Raise PermissionDenied unless principal may use rel_path (with capability, if given)."""
    require_workspace(principal, client_id)
    rel = normalize_rel_path(rel_path)
    perms = folder_permissions(principal, rel)
    if perms is None:
        raise PermissionDenied("No access to this folder", rel)
    if capability is None:
        return
    if capability not in CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")
    # restricted clients only write inside their allowed folders
    if not principal.is_admin and principal.allowed_roots is not None and top_level_folder(rel) == "":
        raise PermissionDenied("Choose a folder first", rel)
    if not getattr(perms, capability):
        raise PermissionDenied("Not permitted in this folder", rel)


def require_admin(principal: Principal):
    if not principal.is_admin:
        raise PermissionDenied("Admin access required", "")


def filter_visible(principal: Principal, rel_path, items: List[dict]) -> List[dict]:
    """Hide top-level folders a restricted client may not see."""
    if principal.is_admin or principal.allowed_roots is None or top_level_folder(rel_path):
        return items
    return [
        i for i in items
        if i["kind"] == "directory" and i["name"] in principal.allowed_roots
    ]
