# Models exports
from app.models.user import (
    UserCreate, UserLogin, UserResponse, TokenResponse,
    FolderPermissions, Principal
)
from app.models.client import (
    ClientType, ServiceFlags, ClientCreate, ClientUpdate, ClientProfile,
    ClientCreatedResponse, StructureResponse
)
from app.models.item import (
    ItemResponse, TrashItemResponse, FolderCreate, TextFileCreate,
    Base64Upload, TrashRestore, WrittenFileResponse, TaxYearAdd
)
