"""Tests for ClientRegistry and tax-year registration."""
import os
import pytest
from app.core.errors import AlreadyExists, InvalidInput, InvalidPath, NotFound
from app.models.client import ClientType, ServiceFlags
from app.services.registry import ClientRegistry, sanitize_client_name
from app.services.tax_years import (
    DEFAULT_TAX_YEARS, add_tax_year, load_tax_years, save_tax_years, validate_tax_year
)

YEARS = ["2024-25", "2025-26"]


@pytest.fixture
def registry(tmp_path):
    return ClientRegistry(tmp_path / "02 Clients")


class TestClientNames:
    def test_sanitized(self):
        assert sanitize_client_name("  Smith/Jones: Plumbing  ") == "SmithJones Plumbing"

    @pytest.mark.parametrize("name", ["", "   ", "<>", "99 Archived Clients", "_settings"])
    def test_rejected(self, name):
        with pytest.raises(InvalidInput):
            sanitize_client_name(name)


class TestRegistry:
    def test_create_writes_info_and_structure(self, registry):
        client_id, changes = registry.create("Jane Doe", ClientType.SELF_EMPLOYED, ServiceFlags(), YEARS)
        root = registry.workspace_root(client_id)

        assert client_id == "Jane Doe"
        assert (root / "Client Info.txt").is_file()
        assert (root / "02 Compliance/01 Self Assessment/2025-26/01 Income").is_dir()
        assert "00 Proof of ID" in changes.created

    def test_create_existing_rejected(self, registry):
        registry.create("Jane Doe", ClientType.SELF_EMPLOYED, ServiceFlags(), YEARS)
        with pytest.raises(AlreadyExists):
            registry.create("Jane Doe", ClientType.LANDLORD, ServiceFlags(), YEARS)

    def test_list_ids_skips_archive_and_hidden(self, registry):
        registry.create("Zed", ClientType.OTHER, ServiceFlags(), YEARS)
        registry.create("alpha", ClientType.OTHER, ServiceFlags(), YEARS)
        for name in ("99 Archived Clients", ".git", "_tmp"):
            (registry.clients_base / name).mkdir()
        (registry.clients_base / "stray.txt").write_text("x")

        assert registry.list_ids() == ["Zed", "alpha"]

    def test_list_ids_without_base(self, registry):
        assert registry.list_ids() == []

    def test_workspace_root_lookups(self, registry):
        registry.ensure_base()
        (registry.clients_base / "99 Archived Clients").mkdir()
        with pytest.raises(NotFound):
            registry.workspace_root("Nobody")
        with pytest.raises(NotFound):
            registry.workspace_root("99 Archived Clients")
        with pytest.raises(InvalidPath):
            registry.workspace_root("../02 Clients")

    def test_update_changes_profile(self, registry):
        client_id, _ = registry.create("Acme Ltd", ClientType.LIMITED_COMPANY, ServiceFlags(directors=2), YEARS)
        changes = registry.update(client_id, ClientType.LIMITED_COMPANY, ServiceFlags(vat=True), YEARS)

        profile = registry.get_profile(client_id)
        assert profile.flags.vat is True
        assert profile.flags.directors == 1
        assert "00 Proof of ID - Directors/Director 02" in changes.removed

    def test_update_unknown(self, registry):
        with pytest.raises(NotFound):
            registry.update("Ghost", ClientType.OTHER, ServiceFlags(), YEARS)


class TestTaxYears:
    def test_defaults_when_missing(self, tmp_path):
        assert load_tax_years(tmp_path / "none.txt") == DEFAULT_TAX_YEARS

    def test_round_trip_ignores_blank_lines(self, tmp_path):
        path = tmp_path / "years.txt"
        path.write_text("2023-24\n\n2024-25\n")
        assert load_tax_years(path) == ["2023-24", "2024-25"]
        save_tax_years(path, ["2025-26"])
        assert load_tax_years(path) == ["2025-26"]

    @pytest.mark.parametrize("label", ["2026-27", " 2099-00 "])
    def test_valid_labels(self, label):
        assert validate_tax_year(label) == label.strip()

    @pytest.mark.parametrize("label", ["", "2026", "2026-28", "26-27", "2026/27", "../2026-27"])
    def test_invalid_labels(self, label):
        with pytest.raises(InvalidInput):
            validate_tax_year(label)

    def test_fan_out_follows_each_layout(self, tmp_path, registry):
        years_file = tmp_path / "years.txt"
        se, _ = registry.create("Sole Trader", ClientType.SELF_EMPLOYED, ServiceFlags(), YEARS)
        lc, _ = registry.create("Acme Ltd", ClientType.LIMITED_COMPANY, ServiceFlags(), YEARS)
        se_receipt = registry.workspace_root(se) / "02 Compliance/01 Self Assessment/2024-25/01 Income/p60.pdf"
        se_receipt.write_bytes(b"%PDF-p60")
        lc_years_before = sorted(
            p.name for p in (registry.workspace_root(lc) / "02 Compliance/01 Corporation Tax").iterdir()
        )

        years = add_tax_year(years_file, "2026-27", registry)

        assert years == YEARS + ["2026-27"]
        assert load_tax_years(years_file) == years
        se_root, lc_root = registry.workspace_root(se), registry.workspace_root(lc)
        assert (se_root / "02 Compliance/01 Self Assessment/2026-27/06 Other Documents").is_dir()
        assert not (se_root / "02 Compliance/01 Corporation Tax").exists()
        assert (lc_root / "02 Compliance/01 Corporation Tax/2026-27/03 Computation").is_dir()
        assert (lc_root / "02 Compliance/02 Accounts/2026-27/01 Bank").is_dir()
        assert not (lc_root / "02 Compliance/01 Self Assessment").exists()
        assert se_receipt.read_bytes() == b"%PDF-p60"
        assert sorted(os.listdir(se_root / "02 Compliance/01 Self Assessment/2024-25/01 Income")) == ["p60.pdf"]
        lc_years_after = sorted(p.name for p in (lc_root / "02 Compliance/01 Corporation Tax").iterdir())
        assert lc_years_after == lc_years_before + ["2026-27"]

    def test_repeat_add_completes_missing_folders(self, tmp_path, registry):
        years_file = tmp_path / "years.txt"
        client_id, _ = registry.create("Jane Doe", ClientType.SELF_EMPLOYED, ServiceFlags(), YEARS)
        save_tax_years(years_file, YEARS + ["2026-27"])

        years = add_tax_year(years_file, "2026-27", registry)

        assert years.count("2026-27") == 1
        root = registry.workspace_root(client_id)
        assert (root / "02 Compliance/01 Self Assessment/2026-27").is_dir()
