"""Shared fixtures: throwaway workspace trees and an API client with auth stubbed out."""
import pytest
from fastapi.testclient import TestClient

from app.core.security import get_principal
from app.main import app
from app.models.client import ClientType, ServiceFlags
from app.models.user import FolderPermissions, Principal
from app.services.workspace import WorkspaceService, get_workspace

TAX_YEARS = ["2024-25", "2025-26"]


@pytest.fixture
def workspace_root(tmp_path):
    root = tmp_path / "client"
    root.mkdir()
    return root


@pytest.fixture
def service(tmp_path):
    return WorkspaceService(
        tmp_path / "02 Clients",
        tmp_path / "_settings_taxyears.txt",
        max_upload_bytes=1024,
    )


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", role="admin")


@pytest.fixture
def acme(service, admin):
    """An existing limited company with bookkeeping and two directors."""
    client_id, _ = service.create_client(
        admin, "Acme Ltd", ClientType.LIMITED_COMPANY,
        ServiceFlags(bookkeeping=True, directors=2),
    )
    return client_id


@pytest.fixture
def acme_user(acme):
    """Client login for Acme restricted to its bookkeeping folder, no deleting."""
    return Principal(
        user_id="client-1",
        role="client",
        client_id=acme,
        allowed_roots=["01 Bookkeeping"],
        permissions={"01 Bookkeeping": FolderPermissions(can_delete=False)},
    )


@pytest.fixture
def api(service):
    """TestClient acting as whoever api.principal is set to (admin by default)."""
    state = {"principal": Principal(user_id="admin-1", role="admin")}
    app.dependency_overrides[get_workspace] = lambda: service
    app.dependency_overrides[get_principal] = lambda: state["principal"]
    client = TestClient(app)
    client.act_as = lambda principal: state.update(principal=principal)
    yield client
    app.dependency_overrides.clear()
