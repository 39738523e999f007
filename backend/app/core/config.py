import os
from dotenv import load_dotenv

load_dotenv()

# Database (user accounts)
MONGO_URL = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.environ.get("DB_NAME", "client_workspaces")

# JWT
JWT_SECRET = os.environ.get("JWT_SECRET", "your-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24

# Bootstrap admin (created on startup when both are set)
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")

# Workspace storage
WORKSPACE_BASE = os.environ.get("WORKSPACE_BASE", "/tmp/client_workspaces")
CLIENTS_DIR = os.path.join(WORKSPACE_BASE, "02 Clients")
TAXYEARS_FILE = os.path.join(WORKSPACE_BASE, "_settings_taxyears.txt")

# Uploads
MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", "50"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# What happens to a service's folders when the service is switched off: "delete" or "trash"
SERVICE_PRUNE_POLICY = os.environ.get("SERVICE_PRUNE_POLICY", "delete")
