"""
'Client Info.txt' - the human-editable registration record kept in every
workspace root. Only the labelled lines we own are rewritten, so notes and
references typed in by staff survive structure updates.
"""
import re

from app.core.errors import surface_io_errors
from app.models.client import ClientProfile, ClientType, ServiceFlags
from app.services.paths import resolve

INFO_FILE_NAME = "Client Info.txt"

FLAG_LABELS = {
    "bookkeeping": "Bookkeeping Required",
    "vat": "VAT Registered",
    "payroll": "Payroll Required",
    "mtd": "MTD Required (ITSA)",
    "extra_service": "Other extra-service",
}


def client_info_template(client_type: ClientType) -> str:
    return (
        f"Client Type: {ClientType(client_type).value}\n"
        "Client Status: Active\n"
        "Client Tag:\n"
        "Directors Count: 1\n"
        "Bookkeeping Required: No\n"
        "VAT Registered: No\n"
        "Payroll Required: No\n"
        "MTD Required (ITSA): No\n"
        "Other extra-service: No\n"
        "\n"
        "UTR:\n"
        "CRN:\n"
        "VAT Number:\n"
        "PAYE Reference:\n"
        "Notes:\n"
    )


def yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _yn(value: bool) -> str:
    return "Y" if value else "N"


def build_client_tag(client_type: ClientType, flags: ServiceFlags) -> str:
    """Compact summary, e.g. 'Limited Company | BK:Y | VAT:N | PAYE:Y | MTD:N | EXTRA:N | DIR:2'."""
    client_type = ClientType(client_type)
    tag = (
        f"{client_type.value}"
        f" | BK:{_yn(flags.bookkeeping)}"
        f" | VAT:{_yn(flags.vat)}"
        f" | PAYE:{_yn(flags.payroll)}"
        f" | MTD:{_yn(flags.mtd)}"
        f" | EXTRA:{_yn(flags.extra_service)}"
    )
    if client_type == ClientType.LIMITED_COMPANY:
        tag += f" | DIR:{flags.directors}"
    return tag


def set_line(text: str, label: str, value: str) -> str:
    """Replace the 'label: ...' line, or prepend it when missing."""
    line = f"{label}: {value}".rstrip()
    pattern = re.compile(rf"^{re.escape(label)}:.*$", re.MULTILINE)
    if pattern.search(text):
        return pattern.sub(lambda _: line, text, count=1)
    return f"{line}\n{text}"


def get_line(text: str, label: str) -> str:
    m = re.search(rf"^{re.escape(label)}:[ \t]*(.*)$", text, re.MULTILINE)
    return m.group(1).strip() if m else ""


def ensure_client_info(workspace_root, client_type: ClientType):
    path = resolve(workspace_root, INFO_FILE_NAME)
    if path.is_file():
        return
    with surface_io_errors(INFO_FILE_NAME):
        path.write_text(client_info_template(client_type), encoding="utf-8")


def update_client_info(workspace_root, client_type: ClientType, flags: ServiceFlags):
    client_type = ClientType(client_type)
    ensure_client_info(workspace_root, client_type)
    path = resolve(workspace_root, INFO_FILE_NAME)
    with surface_io_errors(INFO_FILE_NAME):
        text = path.read_text(encoding="utf-8")

    text = set_line(text, "Client Type", client_type.value)
    text = set_line(text, "Client Status", "Active")
    text = set_line(text, "Directors Count", str(flags.directors))
    for field, label in FLAG_LABELS.items():
        text = set_line(text, label, yes_no(getattr(flags, field)))
    text = set_line(text, "Client Tag", build_client_tag(client_type, flags))

    with surface_io_errors(INFO_FILE_NAME):
        path.write_text(text, encoding="utf-8")


def read_client_info(workspace_root, client_id: str) -> ClientProfile:
    """Parse the info file; unknown or missing values fall back to defaults."""
    path = resolve(workspace_root, INFO_FILE_NAME)
    text = ""
    if path.is_file():
        with surface_io_errors(INFO_FILE_NAME):
            text = path.read_text(encoding="utf-8")

    try:
        client_type = ClientType(get_line(text, "Client Type"))
    except ValueError:
        client_type = ClientType.OTHER
    try:
        directors = max(1, int(get_line(text, "Directors Count") or 1))
    except ValueError:
        directors = 1
    flag_values = {
        field: get_line(text, label).lower() in ("yes", "y", "true")
        for field, label in FLAG_LABELS.items()
    }
    return ClientProfile(
        id=client_id,
        type=client_type,
        status=get_line(text, "Client Status") or "Active",
        tag=get_line(text, "Client Tag"),
        flags=ServiceFlags(directors=directors, **flag_values),
    )
