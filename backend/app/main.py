import logging
import uuid
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routes import (
    auth_router,
    admin_router,
    clients_router,
    files_router,
    trash_router,
    tax_years_router,
)
from app.core.config import ADMIN_EMAIL, ADMIN_PASSWORD
from app.core.database import client
from app.services.tax_years import load_tax_years, save_tax_years
from app.services.workspace import get_workspace
from app.utils import utc_now_iso

# Logging setup
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create app
app = FastAPI(
    title="Client Workspace API",
    description="Per-client document folders for an accounting practice",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(clients_router, prefix="/api")
app.include_router(files_router, prefix="/api")
app.include_router(trash_router, prefix="/api")
app.include_router(tax_years_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}


@app.on_event("startup")
async def startup_db_client():
    logger.info("Starting Client Workspace API v1.0.0")

    ops = get_workspace()
    ops.registry.ensure_base()
    if not ops.tax_years_file.exists():
        save_tax_years(ops.tax_years_file, load_tax_years(ops.tax_years_file))
        logger.info(f"Seeded tax years file at {ops.tax_years_file}")

    await _ensure_admin_account()


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()


async def _ensure_admin_account():
    """Create the bootstrap admin from ADMIN_EMAIL / ADMIN_PASSWORD if it does not exist yet."""
    from app.core.database import db
    from app.core.security import hash_password

    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        return
    existing = await db.users.find_one({"email": ADMIN_EMAIL}, {"_id": 0, "id": 1, "role": 1})
    if existing:
        if existing.get("role") != "admin":
            await db.users.update_one({"email": ADMIN_EMAIL}, {"$set": {"role": "admin"}})
            logger.info(f"Promoted {ADMIN_EMAIL} to admin")
        return
    await db.users.insert_one({
        "id": str(uuid.uuid4()),
        "email": ADMIN_EMAIL,
        "password": hash_password(ADMIN_PASSWORD),
        "name": "Administrator",
        "role": "admin",
        "client_id": None,
        "allowed_roots": None,
        "permissions": {},
        "created_at": utc_now_iso(),
    })
    logger.info(f"Created bootstrap admin {ADMIN_EMAIL}")
