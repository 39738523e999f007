# Routes exports
from app.routes.auth import router as auth_router
from app.routes.admin import router as admin_router
from app.routes.clients import router as clients_router
from app.routes.files import router as files_router
from app.routes.trash import router as trash_router
from app.routes.tax_years import router as tax_years_router
