"""
Standard folder skeleton for client workspaces.

The layout per client type is plain configuration (LAYOUTS). apply_structure()
is idempotent: it only creates what is missing and only removes branches whose
service has been switched off. Pruned branches are deleted outright unless the
caller asks for PrunePolicy.TRASH, in which case they go through the trash.
"""
import logging
import re
import shutil
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel

from app.core.errors import surface_io_errors
from app.models.client import ClientType, ServiceFlags
from app.services.paths import join_rel, resolve
from app.services.trash import trash_item

logger = logging.getLogger(__name__)

PROOF_OF_ID_ROOT = "00 Proof of ID"
DIRECTORS_ROOT = "00 Proof of ID - Directors"
BOOKKEEPING_ROOT = "01 Bookkeeping"
OTHER_SERVICES_ROOT = "03 Other Services"
EXTRA_SERVICE_ROOT = "03 Other Services/01 Other extra-service"

ID_PACK = (
    "01 Passport - BRP - eVisa",
    "02 Proof of Address",
    "03 Signed Engagement Letter",
)

EXTRA_SERVICE_SUBFOLDERS = (
    "01 Client Documents",
    "02 Our Work (Drafts)",
    "03 Submitted",
    "99 Outcome",
)

SELF_ASSESSMENT_SUBFOLDERS = (
    "01 Income",
    "02 Expenses",
    "03 Bank",
    "04 CIS (if any)",
    "05 Pensions & Benefits",
    "06 Other Documents",
    "99 Final & Submitted",
)

PROPERTY_INCOME_SUBFOLDERS = (
    "01 Rental Income",
    "02 Expenses",
    "03 Mortgage Interest",
    "04 Letting Agent",
    "99 Final & Submitted",
)

CORPORATION_TAX_SUBFOLDERS = (
    "01 Trial Balance",
    "02 Adjustments",
    "03 Computation",
    "04 CT600 & iXBRL",
    "99 Final & Submitted",
)

ACCOUNTS_SUBFOLDERS = (
    "01 Bank",
    "02 Sales",
    "03 Purchases",
    "04 Payroll",
    "05 Fixed Assets",
    "99 Year End Pack",
)

_DIRECTOR_FOLDER = re.compile(r"^Director\s+(\d+)$", re.IGNORECASE)


class PrunePolicy(str, Enum):
    DELETE = "delete"
    TRASH = "trash"


class Branch(NamedTuple):
    """A tax-year partitioned folder; service names the ServiceFlags switch, None = always."""
    path: str
    service: Optional[str] = None
    year_subfolders: Tuple[str, ...] = ()


LAYOUTS: Dict[ClientType, Tuple[Branch, ...]] = {
    ClientType.SELF_EMPLOYED: (
        Branch("01 Bookkeeping/01 Source Documents", "bookkeeping"),
        Branch("01 Bookkeeping/02 Bank", "bookkeeping"),
        Branch("01 Bookkeeping/03 Income", "bookkeeping"),
        Branch("01 Bookkeeping/04 Expenses", "bookkeeping"),
        Branch("02 Compliance/01 Self Assessment", None, SELF_ASSESSMENT_SUBFOLDERS),
        Branch("02 Compliance/02 MTD (ITSA)", "mtd"),
        Branch("02 Compliance/03 VAT", "vat"),
        Branch("02 Compliance/04 PAYE", "payroll"),
    ),
    ClientType.LANDLORD: (
        Branch("01 Bookkeeping/01 Bank", "bookkeeping"),
        Branch("01 Bookkeeping/02 Rental Income", "bookkeeping"),
        Branch("01 Bookkeeping/03 Expenses", "bookkeeping"),
        Branch("02 Compliance/01 Self Assessment", None, SELF_ASSESSMENT_SUBFOLDERS),
        Branch("02 Compliance/02 Property Income", None, PROPERTY_INCOME_SUBFOLDERS),
        Branch("02 Compliance/03 MTD (ITSA)", "mtd"),
    ),
    ClientType.LIMITED_COMPANY: (
        Branch("01 Bookkeeping/01 Bank", "bookkeeping"),
        Branch("01 Bookkeeping/02 Sales", "bookkeeping"),
        Branch("01 Bookkeeping/03 Purchases", "bookkeeping"),
        Branch("02 Compliance/01 Corporation Tax", None, CORPORATION_TAX_SUBFOLDERS),
        Branch("02 Compliance/02 Accounts", None, ACCOUNTS_SUBFOLDERS),
        Branch("02 Compliance/03 VAT", "vat"),
        Branch("02 Compliance/04 PAYE", "payroll"),
    ),
    ClientType.OTHER: (),
}


class StructureChanges(BaseModel):
    created: List[str] = []
    removed: List[str] = []


def director_folder_name(index: int) -> str:
    return f"Director {index:02d}"


def _ensure_dir(workspace_root, rel: str, changes: StructureChanges):
    target = resolve(workspace_root, rel)
    if target.is_dir():
        return
    with surface_io_errors(rel):
        target.mkdir(parents=True, exist_ok=True)
    changes.created.append(rel)


def _ensure_tree(workspace_root, base: str, children: Iterable[str], changes: StructureChanges):
    _ensure_dir(workspace_root, base, changes)
    for child in children:
        _ensure_dir(workspace_root, join_rel(base, child), changes)


def _ensure_yearly_branch(workspace_root, branch: Branch, tax_years, changes: StructureChanges):
    _ensure_dir(workspace_root, branch.path, changes)
    for year in tax_years:
        _ensure_tree(workspace_root, join_rel(branch.path, year), branch.year_subfolders, changes)


def _prune(workspace_root, rel: str, policy: PrunePolicy, changes: StructureChanges):
    target = resolve(workspace_root, rel)
    if not target.is_dir():
        return
    if policy == PrunePolicy.TRASH:
        parent, _, name = rel.rpartition("/")
        trash_item(workspace_root, parent, name)
    else:
        with surface_io_errors(rel):
            shutil.rmtree(target)
    changes.removed.append(rel)


def _prune_directors(workspace_root, keep: int, policy: PrunePolicy, changes: StructureChanges):
    root = resolve(workspace_root, DIRECTORS_ROOT)
    if not root.is_dir():
        return
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        m = _DIRECTOR_FOLDER.match(entry.name)
        if m and int(m.group(1)) > keep:
            _prune(workspace_root, join_rel(DIRECTORS_ROOT, entry.name), policy, changes)


def _remove_if_empty(workspace_root, rel: str, changes: StructureChanges):
    target = resolve(workspace_root, rel)
    if target.is_dir() and not any(target.iterdir()):
        with surface_io_errors(rel):
            target.rmdir()
        changes.removed.append(rel)


def apply_structure(
    workspace_root,
    client_type: ClientType,
    flags: ServiceFlags,
    tax_years: List[str],
    prune_policy: PrunePolicy = PrunePolicy.DELETE,
) -> StructureChanges:
    """Bring a workspace in line with its type and service selection."""
    client_type = ClientType(client_type)
    flags = flags.normalized_for(client_type)
    layout = LAYOUTS[client_type]
    changes = StructureChanges()

    # disabled services first, then whatever is missing
    if not flags.bookkeeping:
        _prune(workspace_root, BOOKKEEPING_ROOT, prune_policy, changes)
    if not flags.extra_service:
        _prune(workspace_root, EXTRA_SERVICE_ROOT, prune_policy, changes)
        _remove_if_empty(workspace_root, OTHER_SERVICES_ROOT, changes)
    for branch in layout:
        if branch.service in (None, "bookkeeping"):
            continue
        if not getattr(flags, branch.service):
            _prune(workspace_root, branch.path, prune_policy, changes)
    if client_type == ClientType.LIMITED_COMPANY:
        _prune_directors(workspace_root, flags.directors, prune_policy, changes)

    _ensure_tree(workspace_root, PROOF_OF_ID_ROOT, ID_PACK, changes)
    if client_type == ClientType.LIMITED_COMPANY:
        _ensure_dir(workspace_root, DIRECTORS_ROOT, changes)
        for i in range(1, flags.directors + 1):
            _ensure_tree(workspace_root, join_rel(DIRECTORS_ROOT, director_folder_name(i)), ID_PACK, changes)

    for branch in layout:
        if branch.service is None or getattr(flags, branch.service):
            _ensure_yearly_branch(workspace_root, branch, tax_years, changes)

    if flags.extra_service:
        _ensure_tree(workspace_root, EXTRA_SERVICE_ROOT, EXTRA_SERVICE_SUBFOLDERS, changes)

    if changes.created or changes.removed:
        logger.info(
            f"Structure applied ({client_type.value}): "
            f"{len(changes.created)} created, {len(changes.removed)} removed"
        )
    return changes


def yearly_branches() -> Dict[str, Tuple[str, ...]]:
    """Every tax-year partitioned branch across all layouts, keyed by path."""
    result: Dict[str, Tuple[str, ...]] = {}
    for layout in LAYOUTS.values():
        for branch in layout:
            known = result.get(branch.path, ())
            merged = known + tuple(s for s in branch.year_subfolders if s not in known)
            result[branch.path] = merged
    return result


def extend_tax_year(workspace_root, year: str) -> List[str]:
    """Add one tax year beneath every yearly branch that already exists."""
    changes = StructureChanges()
    for path, subfolders in yearly_branches().items():
        if not resolve(workspace_root, path).is_dir():
            continue
        _ensure_tree(workspace_root, join_rel(path, year), subfolders, changes)
    return changes.created
