from pydantic import BaseModel
from typing import Optional, Literal


class ItemResponse(BaseModel):
    name: str
    kind: Literal["directory", "file"]
    size: Optional[int] = None
    modified_at: Optional[str] = None


class TrashItemResponse(ItemResponse):
    original_path: Optional[str] = None
    trashed_at: Optional[str] = None


class FolderCreate(BaseModel):
    name: str


class TextFileCreate(BaseModel):
    fileName: str
    text: str = ""
    contentType: Optional[str] = "text/plain"


class Base64Upload(BaseModel):
    fileName: str
    base64: str
    contentType: Optional[str] = None


class TrashRestore(BaseModel):
    path: str = ""
    name: str


class WrittenFileResponse(BaseModel):
    path: str
    name: str
    size: int


class TaxYearAdd(BaseModel):
    year: str
