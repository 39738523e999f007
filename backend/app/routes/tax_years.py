from fastapi import APIRouter, Depends
from app.core.errors import WorkspaceError, to_http_exception
from app.core.security import get_principal
from app.models.item import TaxYearAdd
from app.models.user import Principal
from app.services.workspace import WorkspaceService, get_workspace

router = APIRouter(prefix="/taxyears", tags=["taxyears"])


@router.get("")
def list_tax_years(
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        return {"years": ops.tax_years()}
    except WorkspaceError as e:
        raise to_http_exception(e)


@router.post("")
def add_tax_year(
    data: TaxYearAdd,
    principal: Principal = Depends(get_principal),
    ops: WorkspaceService = Depends(get_workspace),
):
    try:
        years = ops.add_tax_year(principal, data.year)
    except WorkspaceError as e:
        raise to_http_exception(e)
    return {"years": years}
