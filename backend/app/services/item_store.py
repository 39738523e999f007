"""
File and folder operations inside a client workspace.
Every target is resolved through app.services.paths; nothing here accepts an
absolute path.
"""
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List

from app.core.errors import (
    InvalidPath,
    NotADirectory,
    NotAFile,
    NotFound,
    PayloadTooLarge,
    surface_io_errors,
)
from app.services.paths import (
    TRASH_ROOT,
    is_within,
    join_rel,
    normalize_rel_path,
    resolve,
    sanitize_name,
    validate_entry_name,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 50 * 1024 * 1024  # 50MB
TEXT_EXTENSION = ".txt"


def describe_entries(directory: Path, hidden: Iterable[str] = ()) -> List[dict]:
    """Directories first, then files, each group ordered by name."""
    hidden = set(hidden)
    items = []
    for entry in os.scandir(directory):
        if entry.name in hidden:
            continue
        is_dir = entry.is_dir()
        try:
            st = entry.stat()
        except FileNotFoundError:
            # dangling symlink, or removed since scandir
            try:
                st = entry.stat(follow_symlinks=False)
            except FileNotFoundError:
                continue
        items.append({
            "name": entry.name,
            "kind": "directory" if is_dir else "file",
            "size": None if is_dir else st.st_size,
            "modified_at": datetime.fromtimestamp(st.st_mtime, timezone.utc).isoformat(),
        })
    items.sort(key=lambda i: (i["kind"] != "directory", i["name"].lower(), i["name"]))
    return items


def _live_rel(rel_path, name: str = "") -> str:
    rel = join_rel(normalize_rel_path(rel_path), name)
    if is_within(rel, TRASH_ROOT):
        raise InvalidPath("Use the trash operations for items in the trash", rel)
    return rel


def _clean_file_name(file_name) -> str:
    name = sanitize_name(file_name)
    if not name:
        raise InvalidPath("File name is empty after removing unsafe characters", str(file_name or ""))
    return name


def list_items(workspace_root, rel_path="") -> List[dict]:
    rel = _live_rel(rel_path)
    target = resolve(workspace_root, rel)
    if not target.exists():
        raise NotFound("Folder not found", rel)
    if not target.is_dir():
        raise NotADirectory("Not a folder", rel)
    hidden = {TRASH_ROOT.rpartition("/")[2]} if rel == TRASH_ROOT.rpartition("/")[0] else ()
    with surface_io_errors(rel):
        return describe_entries(target, hidden)


def _write_bytes(workspace_root, rel_dir: str, name: str, data: bytes) -> str:
    rel = _live_rel(rel_dir, name)
    directory = resolve(workspace_root, rel_dir)
    if directory.exists() and not directory.is_dir():
        raise NotADirectory("Not a folder", rel_dir)
    target = resolve(workspace_root, rel)
    if target.is_dir():
        raise NotAFile("A folder with this name already exists", rel)
    with surface_io_errors(rel):
        directory.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
    return rel


def write_upload(workspace_root, rel_path, file_name, data: bytes, max_bytes: int = DEFAULT_MAX_BYTES) -> dict:
    """Store an uploaded file, replacing any file of the same name."""
    if len(data) > max_bytes:
        raise PayloadTooLarge(f"File exceeds the {max_bytes} byte limit", str(file_name or ""))
    rel_dir = _live_rel(rel_path)
    name = _clean_file_name(file_name)
    rel = _write_bytes(workspace_root, rel_dir, name, data)
    logger.info(f"Upload: {rel} ({len(data)} bytes)")
    return {"path": rel, "name": name, "size": len(data)}


def write_text(workspace_root, rel_path, file_name, content: str, max_bytes: int = DEFAULT_MAX_BYTES) -> dict:
    name = _clean_file_name(file_name)
    if not os.path.splitext(name)[1]:
        name += TEXT_EXTENSION
    data = (content or "").encode("utf-8")
    if len(data) > max_bytes:
        raise PayloadTooLarge(f"Text exceeds the {max_bytes} byte limit", name)
    rel = _write_bytes(workspace_root, _live_rel(rel_path), name, data)
    logger.info(f"Text file written: {rel}")
    return {"path": rel, "name": name, "size": len(data)}


def open_download(workspace_root, rel_path, file_name) -> Path:
    """Absolute location of a downloadable file. Callers must not echo it to clients."""
    rel = _live_rel(rel_path, validate_entry_name(file_name))
    target = resolve(workspace_root, rel)
    if not target.exists():
        raise NotFound("File not found", rel)
    if not target.is_file():
        raise NotAFile("Not a file", rel)
    return target


def make_folder(workspace_root, rel_path, name) -> dict:
    clean = sanitize_name(name)
    if not clean:
        raise InvalidPath("Folder name is empty after removing unsafe characters", str(name or ""))
    rel = _live_rel(rel_path, clean)
    target = resolve(workspace_root, rel)
    if target.exists() and not target.is_dir():
        raise NotADirectory("A file with this name already exists", rel)
    if not target.exists():
        with surface_io_errors(rel):
            target.mkdir(parents=True, exist_ok=True)
        logger.info(f"Folder created: {rel}")
    return {"path": rel, "name": clean}


def delete_hard(workspace_root, rel_path, file_name):
    """Permanently remove a single file. User-facing deletes go through the trash."""
    rel = _live_rel(rel_path, validate_entry_name(file_name))
    target = resolve(workspace_root, rel)
    if not target.exists():
        raise NotFound("File not found", rel)
    if target.is_dir():
        raise NotAFile("Folders cannot be deleted this way", rel)
    with surface_io_errors(rel):
        target.unlink()
    logger.info(f"File deleted permanently: {rel}")
