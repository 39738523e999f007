"""HTTP-level tests: routes, status codes and error bodies."""
import base64
from app.models.user import FolderPermissions, Principal


def _create(api, name="Acme Ltd", type_="Limited Company", **flags):
    return api.post("/api/clients", json={"name": name, "type": type_, "flags": flags})


class TestHealth:
    def test_health(self, api):
        r = api.get("/api/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestClients:
    def test_create_list_get(self, api):
        r = _create(api, bookkeeping=True, directors=2)
        assert r.status_code == 200
        assert r.json()["id"] == "Acme Ltd"
        assert "00 Proof of ID - Directors/Director 02" in r.json()["created"]

        assert api.get("/api/clients").json() == {"clients": ["Acme Ltd"]}

        profile = api.get("/api/clients/Acme Ltd").json()
        assert profile["type"] == "Limited Company"
        assert profile["flags"]["directors"] == 2
        assert profile["tag"].startswith("Limited Company | BK:Y")

    def test_duplicate_is_conflict(self, api):
        _create(api)
        r = _create(api)
        assert r.status_code == 409
        assert r.json()["detail"]["kind"] == "already_exists"

    def test_invalid_type(self, api):
        assert _create(api, type_="Charity").status_code == 422

    def test_update_reports_changes(self, api):
        _create(api, directors=3)
        r = api.put("/api/clients/Acme Ltd", json={"type": "Limited Company", "flags": {"directors": 1, "vat": True}})
        assert r.status_code == 200
        body = r.json()
        assert "00 Proof of ID - Directors/Director 03" in body["removed"]
        assert "02 Compliance/03 VAT" in body["created"]
        assert body["profile"]["flags"]["vat"] is True

    def test_unknown_client(self, api):
        r = api.get("/api/clients/Nobody")
        assert r.status_code == 404
        assert r.json()["detail"] == {"kind": "not_found", "message": "Client not found", "path": "Nobody"}


class TestFiles:
    def test_upload_list_download(self, api):
        _create(api)
        r = api.post(
            "/api/clients/Acme Ltd/upload",
            params={"path": "02 Compliance/02 Accounts"},
            files={"file": ("tb.csv", b"a,b\n1,2\n", "text/csv")},
        )
        assert r.status_code == 200
        assert r.json() == {"path": "02 Compliance/02 Accounts/tb.csv", "name": "tb.csv", "size": 8}

        items = api.get("/api/clients/Acme Ltd/files", params={"path": "02 Compliance/02 Accounts"}).json()
        assert [i["name"] for i in items] == ["2024-25", "2025-26", "tb.csv"]

        r = api.get("/api/clients/Acme Ltd/download", params={"path": "02 Compliance/02 Accounts", "file": "tb.csv"})
        assert r.status_code == 200
        assert r.content == b"a,b\n1,2\n"

    def test_upload_too_large(self, api):
        _create(api)
        r = api.post(
            "/api/clients/Acme Ltd/upload",
            params={"path": "00 Proof of ID"},
            files={"file": ("scan.jpg", b"x" * 2048, "image/jpeg")},
        )
        assert r.status_code == 413

    def test_upload_base64_data_url(self, api, service):
        _create(api)
        payload = "data:text/plain;base64," + base64.b64encode(b"hello").decode()
        r = api.post(
            "/api/clients/Acme Ltd/uploadBase64",
            params={"path": "00 Proof of ID"},
            json={"fileName": "note.txt", "base64": payload, "contentType": "text/plain"},
        )
        assert r.status_code == 200
        root = service.registry.workspace_root("Acme Ltd")
        assert (root / "00 Proof of ID/note.txt").read_bytes() == b"hello"

    def test_upload_base64_garbage(self, api):
        _create(api)
        r = api.post(
            "/api/clients/Acme Ltd/uploadBase64",
            json={"fileName": "x.bin", "base64": "***"},
        )
        assert r.status_code == 400
        assert r.json()["detail"]["kind"] == "invalid_input"

    def test_mkdir_and_write_text(self, api):
        _create(api)
        r = api.post("/api/clients/Acme Ltd/mkdir", params={"path": "00 Proof of ID"}, json={"name": "Extra"})
        assert r.json() == {"path": "00 Proof of ID/Extra", "name": "Extra"}

        r = api.post(
            "/api/clients/Acme Ltd/writeText",
            params={"path": "00 Proof of ID/Extra"},
            json={"fileName": "phone call", "text": "Called HMRC"},
        )
        assert r.json()["path"] == "00 Proof of ID/Extra/phone call.txt"

    def test_traversal_never_leaks_host_paths(self, api, service):
        _create(api)
        r = api.get("/api/clients/Acme Ltd/files", params={"path": "../../etc"})
        assert r.status_code == 400
        detail = r.json()["detail"]
        assert detail["kind"] == "invalid_path"
        assert str(service.registry.clients_base) not in r.text

    def test_missing_folder(self, api):
        _create(api)
        r = api.get("/api/clients/Acme Ltd/files", params={"path": "nope"})
        assert r.status_code == 404


class TestTrash:
    def test_delete_restore_cycle(self, api):
        _create(api)
        api.post(
            "/api/clients/Acme Ltd/writeText",
            params={"path": "00 Proof of ID"},
            json={"fileName": "old.txt", "text": "x"},
        )

        r = api.delete("/api/clients/Acme Ltd/file", params={"path": "00 Proof of ID", "file": "old.txt"})
        assert r.status_code == 200
        assert r.json()["original_path"] == "00 Proof of ID/old.txt"

        entries = api.get("/api/clients/Acme Ltd/trash").json()
        assert [(e["name"], e["original_path"]) for e in entries] == [("old.txt", "00 Proof of ID/old.txt")]

        r = api.post("/api/clients/Acme Ltd/trash/restore", json={"path": "", "name": "old.txt"})
        assert r.json()["path"] == "00 Proof of ID/old.txt"
        assert api.get("/api/clients/Acme Ltd/trash").json() == []

    def test_purge_and_empty(self, api):
        _create(api)
        for name in ("a.txt", "b.txt"):
            api.post("/api/clients/Acme Ltd/writeText", params={"path": "00 Proof of ID"}, json={"fileName": name})
            api.delete("/api/clients/Acme Ltd/file", params={"path": "00 Proof of ID", "file": name})

        assert api.delete("/api/clients/Acme Ltd/trash/item", params={"name": "a.txt"}).status_code == 200
        assert api.delete("/api/clients/Acme Ltd/trash/item", params={"name": "a.txt"}).status_code == 404

        r = api.delete("/api/clients/Acme Ltd/trash")
        assert r.json()["removed"] == 1

    def test_delete_missing(self, api):
        _create(api)
        r = api.delete("/api/clients/Acme Ltd/file", params={"path": "", "file": "ghost.pdf"})
        assert r.status_code == 404


class TestClientRole:
    def test_restricted_client(self, api):
        _create(api, bookkeeping=True)
        api.act_as(Principal(
            user_id="client-1",
            role="client",
            client_id="Acme Ltd",
            allowed_roots=["01 Bookkeeping"],
            permissions={"01 Bookkeeping": FolderPermissions(can_delete=False)},
        ))

        assert api.get("/api/clients").json() == {"clients": ["Acme Ltd"]}
        names = [i["name"] for i in api.get("/api/clients/Acme Ltd/files").json()]
        assert names == ["01 Bookkeeping"]

        r = api.post(
            "/api/clients/Acme Ltd/upload",
            params={"path": "01 Bookkeeping/01 Bank"},
            files={"file": ("jan.csv", b"1", "text/csv")},
        )
        assert r.status_code == 200

        r = api.delete("/api/clients/Acme Ltd/file", params={"path": "01 Bookkeeping/01 Bank", "file": "jan.csv"})
        assert r.status_code == 403
        assert r.json()["detail"]["kind"] == "permission_denied"

        assert api.get("/api/clients/Acme Ltd/files", params={"path": "02 Compliance"}).status_code == 403
        assert api.get("/api/clients/Acme Ltd/trash").status_code == 403
        assert _create(api, name="Sneaky").status_code == 403
        assert api.post("/api/taxyears", json={"year": "2026-27"}).status_code == 403


class TestTaxYears:
    def test_list_and_add(self, api, service):
        _create(api, type_="Self-Employed")
        assert api.get("/api/taxyears").json() == {"years": ["2024-25", "2025-26"]}

        r = api.post("/api/taxyears", json={"year": "2026-27"})
        assert r.json() == {"years": ["2024-25", "2025-26", "2026-27"]}
        root = service.registry.workspace_root("Acme Ltd")
        assert (root / "02 Compliance/01 Self Assessment/2026-27/01 Income").is_dir()

    def test_bad_label(self, api):
        r = api.post("/api/taxyears", json={"year": "next year"})
        assert r.status_code == 400
