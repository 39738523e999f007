"""
Tax-year labels shared by every workspace, kept in a flat text file
(one label per line).
"""
import logging
import re
from pathlib import Path
from typing import List

from app.core.errors import InvalidInput, surface_io_errors
from app.services.folder_tree import extend_tax_year

logger = logging.getLogger(__name__)

DEFAULT_TAX_YEARS = ["2024-25", "2025-26"]

_TAX_YEAR = re.compile(r"^(\d{4})-(\d{2})$")


def validate_tax_year(label) -> str:
    """'2026-27' style labels only; the second part must follow the first year."""
    text = str(label or "").strip()
    m = _TAX_YEAR.match(text)
    if not m or (int(m.group(1)) + 1) % 100 != int(m.group(2)):
        raise InvalidInput("Tax year must look like 2026-27", text)
    return text


def load_tax_years(path) -> List[str]:
    path = Path(path)
    if not path.is_file():
        return list(DEFAULT_TAX_YEARS)
    with surface_io_errors(path.name):
        text = path.read_text(encoding="utf-8")
    years = [line.strip() for line in text.splitlines() if line.strip()]
    return years or list(DEFAULT_TAX_YEARS)


def save_tax_years(path, years: List[str]):
    path = Path(path)
    with surface_io_errors(path.name):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(years) + "\n", encoding="utf-8")


def add_tax_year(path, year, registry) -> List[str]:
    """
    Register a tax year and add its folders to every existing workspace.

    The fan-out also runs when the year is already registered, so calling
    this again completes an earlier addition that failed part-way.
    Not atomic across clients.
    """
    year = validate_tax_year(year)
    years = load_tax_years(path)
    if year not in years:
        years.append(year)
        save_tax_years(path, years)
        logger.info(f"Tax year registered: {year}")

    for client_id in registry.list_ids():
        created = extend_tax_year(registry.workspace_root(client_id), year)
        if created:
            logger.info(f"Tax year {year} added to {client_id}: {len(created)} folders")
    return years
