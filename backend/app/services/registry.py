"""
Client workspaces: one directory per client under the clients base.
"""
import logging
from pathlib import Path
from typing import List, Tuple

from app.core.errors import AlreadyExists, InvalidInput, NotFound, surface_io_errors
from app.models.client import ClientProfile, ClientType, ServiceFlags
from app.services.client_info import ensure_client_info, read_client_info, update_client_info
from app.services.folder_tree import PrunePolicy, StructureChanges, apply_structure
from app.services.paths import resolve, sanitize_name, validate_entry_name

logger = logging.getLogger(__name__)

CLIENT_NAME_MAX_LENGTH = 80
ARCHIVE_DIR_NAME = "99 Archived Clients"
RESERVED_NAMES = {ARCHIVE_DIR_NAME}


def sanitize_client_name(name) -> str:
    client_id = sanitize_name(name, CLIENT_NAME_MAX_LENGTH)
    if not client_id:
        raise InvalidInput("Client name is required", "")
    if client_id in RESERVED_NAMES or client_id.startswith("_"):
        raise InvalidInput("Client name is reserved", client_id)
    return client_id


class ClientRegistry:
    def __init__(self, clients_base):
        self.clients_base = Path(clients_base)

    def ensure_base(self):
        with surface_io_errors(""):
            self.clients_base.mkdir(parents=True, exist_ok=True)

    def list_ids(self) -> List[str]:
        if not self.clients_base.is_dir():
            return []
        names = [
            e.name for e in self.clients_base.iterdir()
            if e.is_dir()
            and e.name not in RESERVED_NAMES
            and not e.name.startswith((".", "_"))
        ]
        return sorted(names)

    def workspace_root(self, client_id) -> Path:
        client_id = validate_entry_name(client_id)
        root = resolve(self.clients_base, client_id)
        if client_id in RESERVED_NAMES or not root.is_dir():
            raise NotFound("Client not found", client_id)
        return root

    def get_profile(self, client_id) -> ClientProfile:
        root = self.workspace_root(client_id)
        return read_client_info(root, root.name)

    def create(
        self,
        name,
        client_type: ClientType,
        flags: ServiceFlags,
        tax_years: List[str],
        prune_policy: PrunePolicy = PrunePolicy.DELETE,
    ) -> Tuple[str, StructureChanges]:
        """Create a new workspace; a name that is already taken is rejected, not merged."""
        client_id = sanitize_client_name(name)
        self.ensure_base()
        root = resolve(self.clients_base, client_id)
        if root.exists():
            raise AlreadyExists("A client with this name already exists", client_id)

        client_type = ClientType(client_type)
        flags = flags.normalized_for(client_type)
        with surface_io_errors(""):
            root.mkdir()
        ensure_client_info(root, client_type)
        changes = apply_structure(root, client_type, flags, tax_years, prune_policy)
        update_client_info(root, client_type, flags)

        logger.info(f"Client created: {client_id} ({client_type.value})")
        return client_id, changes

    def update(
        self,
        client_id,
        client_type: ClientType,
        flags: ServiceFlags,
        tax_years: List[str],
        prune_policy: PrunePolicy = PrunePolicy.DELETE,
    ) -> StructureChanges:
        root = self.workspace_root(client_id)
        client_type = ClientType(client_type)
        flags = flags.normalized_for(client_type)
        changes = apply_structure(root, client_type, flags, tax_years, prune_policy)
        update_client_info(root, client_type, flags)

        logger.info(
            f"Client updated: {root.name} ({client_type.value}), "
            f"{len(changes.created)} folders created, {len(changes.removed)} removed"
        )
        return changes
