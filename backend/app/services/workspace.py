"""
Operation set exposed to the HTTP layer.

Each method takes the authenticated principal explicitly, checks its
capabilities, resolves the client workspace and delegates to the item store,
trash or folder tree. Errors are WorkspaceError subclasses.
"""
import logging
from pathlib import Path
from typing import List

from app.core.config import CLIENTS_DIR, TAXYEARS_FILE, MAX_UPLOAD_BYTES, SERVICE_PRUNE_POLICY
from app.models.client import ClientProfile, ClientType, ServiceFlags
from app.models.user import Principal
from app.services import item_store, trash
from app.services.access_control import (
    filter_visible,
    require_admin,
    require_folder,
    require_workspace,
)
from app.services.folder_tree import PrunePolicy, StructureChanges
from app.services.paths import join_rel
from app.services.registry import ClientRegistry
from app.services.tax_years import add_tax_year, load_tax_years

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(
        self,
        clients_base,
        tax_years_file,
        max_upload_bytes: int = item_store.DEFAULT_MAX_BYTES,
        prune_policy: PrunePolicy = PrunePolicy.DELETE,
    ):
        self.registry = ClientRegistry(clients_base)
        self.tax_years_file = Path(tax_years_file)
        self.max_upload_bytes = max_upload_bytes
        self.prune_policy = PrunePolicy(prune_policy)

    # ---------- clients ----------

    def list_clients(self, principal: Principal) -> List[str]:
        ids = self.registry.list_ids()
        if principal.is_admin:
            return ids
        return [c for c in ids if c == principal.client_id]

    def get_client(self, principal: Principal, client_id: str) -> ClientProfile:
        require_workspace(principal, client_id)
        return self.registry.get_profile(client_id)

    def create_client(self, principal: Principal, name: str, client_type: ClientType, flags: ServiceFlags):
        require_admin(principal)
        return self.registry.create(name, client_type, flags, self.tax_years(), self.prune_policy)

    def update_client(
        self, principal: Principal, client_id: str, client_type: ClientType, flags: ServiceFlags
    ) -> StructureChanges:
        require_admin(principal)
        return self.registry.update(
            client_id, client_type, flags, self.tax_years(), self.prune_policy
        )

    # ---------- tax years ----------

    def tax_years(self) -> List[str]:
        return load_tax_years(self.tax_years_file)

    def add_tax_year(self, principal: Principal, year: str) -> List[str]:
        require_admin(principal)
        return add_tax_year(self.tax_years_file, year, self.registry)

    # ---------- items ----------

    def list_items(self, principal: Principal, client_id: str, path: str = "") -> List[dict]:
        require_folder(principal, client_id, path)
        root = self.registry.workspace_root(client_id)
        items = item_store.list_items(root, path)
        return filter_visible(principal, path, items)

    def upload(self, principal: Principal, client_id: str, path: str, file_name: str, data: bytes) -> dict:
        require_folder(principal, client_id, path, "can_upload")
        root = self.registry.workspace_root(client_id)
        return item_store.write_upload(root, path, file_name, data, self.max_upload_bytes)

    def download(self, principal: Principal, client_id: str, path: str, file_name: str) -> Path:
        require_folder(principal, client_id, join_rel(path or "", file_name or ""))
        root = self.registry.workspace_root(client_id)
        return item_store.open_download(root, path, file_name)

    def make_folder(self, principal: Principal, client_id: str, path: str, name: str) -> dict:
        require_folder(principal, client_id, path, "can_mkdir")
        root = self.registry.workspace_root(client_id)
        return item_store.make_folder(root, path, name)

    def write_text(self, principal: Principal, client_id: str, path: str, file_name: str, text: str) -> dict:
        require_folder(principal, client_id, path, "can_write_text")
        root = self.registry.workspace_root(client_id)
        return item_store.write_text(root, path, file_name, text, self.max_upload_bytes)

    def move_to_trash(self, principal: Principal, client_id: str, path: str, name: str) -> trash.TrashRecord:
        require_folder(principal, client_id, path, "can_delete")
        root = self.registry.workspace_root(client_id)
        record = trash.trash_item(root, path, name)
        logger.info(f"{principal.role} {principal.user_id} trashed {record.original_path} in {client_id}")
        return record

    # ---------- trash (admin) ----------

    def list_trash(self, principal: Principal, client_id: str, path: str = "") -> List[dict]:
        require_admin(principal)
        return trash.list_trash(self.registry.workspace_root(client_id), path)

    def restore(self, principal: Principal, client_id: str, path: str, name: str) -> str:
        require_admin(principal)
        return trash.restore_item(self.registry.workspace_root(client_id), path, name)

    def purge(self, principal: Principal, client_id: str, path: str, name: str):
        require_admin(principal)
        trash.purge_item(self.registry.workspace_root(client_id), path, name)

    def empty_trash(self, principal: Principal, client_id: str, path: str = "") -> int:
        require_admin(principal)
        return trash.empty_trash(self.registry.workspace_root(client_id), path)


_service = None


def get_workspace() -> WorkspaceService:
    """FastAPI dependency: the process-wide service built from app.core.config."""
    global _service
    if _service is None:
        _service = WorkspaceService(
            CLIENTS_DIR,
            TAXYEARS_FILE,
            max_upload_bytes=MAX_UPLOAD_BYTES,
            prune_policy=PrunePolicy(SERVICE_PRUNE_POLICY),
        )
    return _service
