# Core module exports
from app.core.config import *
from app.core.database import db, client
from app.core.errors import WorkspaceError, to_http_exception
from app.core.security import (
    hash_password,
    verify_password,
    create_token,
    get_current_user,
    get_admin_user,
    get_principal,
    security
)
