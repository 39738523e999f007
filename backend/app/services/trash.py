"""
Per-workspace trash: soft-delete, restore, purge.

Trashed entries are moved (renamed) under TRASH_ROOT keeping their basename,
with a disambiguating suffix on collision. The original location of every
top-level trash entry is kept in a JSON manifest next to the entries, so a
restore still works after a restart or a partially failed operation.
"""
import errno
import functools
import json
import logging
import os
import shutil
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel

from app.core.errors import (
    CrossDeviceMoveError,
    InvalidPath,
    NotADirectory,
    NotFound,
    StorageIOError,
    surface_io_errors,
)
from app.services.item_store import describe_entries
from app.services.paths import (
    TRASH_ROOT,
    is_within,
    join_rel,
    normalize_rel_path,
    resolve,
    validate_entry_name,
)

logger = logging.getLogger(__name__)

MANIFEST_NAME = ".manifest.json"
_MANIFEST_TMP_PREFIX = MANIFEST_NAME + "."
_MANIFEST_TMP_SUFFIX = ".tmp"
_MANIFEST_REL = join_rel(TRASH_ROOT, MANIFEST_NAME)


class TrashRecord(BaseModel):
    trash_name: str
    original_dir: str
    original_name: str
    kind: str
    trashed_at: str

    @property
    def original_path(self) -> str:
        return join_rel(self.original_dir, self.original_name)


_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _is_internal(name: str) -> bool:
    """The manifest and its in-flight temp files; never shown or restorable."""
    return name == MANIFEST_NAME or (
        name.startswith(_MANIFEST_TMP_PREFIX) and name.endswith(_MANIFEST_TMP_SUFFIX)
    )


def _workspace_lock(workspace_root) -> threading.Lock:
    key = os.path.realpath(workspace_root)
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


def _serialized(func):
    """Hold the workspace's trash lock across the manifest load, move and save."""
    @functools.wraps(func)
    def wrapper(workspace_root, *args, **kwargs):
        with _workspace_lock(workspace_root):
            return func(workspace_root, *args, **kwargs)
    return wrapper


def _trash_root(workspace_root) -> Path:
    return resolve(workspace_root, TRASH_ROOT)


def load_manifest(workspace_root) -> Dict[str, dict]:
    path = _trash_root(workspace_root) / MANIFEST_NAME
    if not path.is_file():
        return {}
    with surface_io_errors(_MANIFEST_REL):
        text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if text.strip() else {}
    except ValueError as e:
        raise StorageIOError("Trash manifest is unreadable", _MANIFEST_REL) from e
    return data if isinstance(data, dict) else {}


def _save_manifest(workspace_root, manifest: Dict[str, dict]):
    root = _trash_root(workspace_root)
    with surface_io_errors(_MANIFEST_REL):
        root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=root, prefix=_MANIFEST_TMP_PREFIX, suffix=_MANIFEST_TMP_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(manifest, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp, root / MANIFEST_NAME)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


def _unique_name(directory: Path, name: str, label: str, taken=()) -> str:
    """name itself when free, otherwise 'stem (label stamp[-n])ext'."""
    if not (directory / name).exists() and name not in taken and not _is_internal(name):
        return name
    stem, ext = os.path.splitext(name)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    candidate = f"{stem} ({label} {stamp}){ext}"
    n = 2
    while (directory / candidate).exists() or candidate in taken:
        candidate = f"{stem} ({label} {stamp}-{n}){ext}"
        n += 1
    return candidate


def _move(source: Path, destination: Path, rel: str):
    try:
        os.rename(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise StorageIOError(e.strerror or "Move failed", rel) from e
        # copy + delete; not atomic
        try:
            shutil.move(str(source), str(destination))
        except OSError as e2:
            raise CrossDeviceMoveError(
                "Move across devices failed and may have left a partial copy", rel
            ) from e2


def _remove(target: Path, rel: str):
    with surface_io_errors(rel):
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()


def _inside_trash(workspace_root, target: Path, rel: str):
    root = str(_trash_root(workspace_root))
    if str(target) != root and not str(target).startswith(root + os.sep):
        raise InvalidPath("Target is outside the trash", rel)


@_serialized
def trash_item(workspace_root, rel_dir, name) -> TrashRecord:
    """Move a live entry into the trash and remember where it came from."""
    rel_dir = normalize_rel_path(rel_dir)
    name = validate_entry_name(name)
    rel = join_rel(rel_dir, name)
    if is_within(rel, TRASH_ROOT) or is_within(TRASH_ROOT, rel):
        raise InvalidPath("The trash itself cannot be moved to the trash", rel)

    source = resolve(workspace_root, rel)
    if not source.exists():
        raise NotFound("Item not found", rel)

    root = _trash_root(workspace_root)
    with surface_io_errors(TRASH_ROOT):
        root.mkdir(parents=True, exist_ok=True)
    manifest = load_manifest(workspace_root)
    trash_name = _unique_name(root, name, "deleted", manifest)

    record = TrashRecord(
        trash_name=trash_name,
        original_dir=rel_dir,
        original_name=name,
        kind="directory" if source.is_dir() else "file",
        trashed_at=datetime.now(timezone.utc).isoformat(),
    )
    _move(source, root / trash_name, rel)
    manifest[trash_name] = record.model_dump(exclude={"trash_name"})
    _save_manifest(workspace_root, manifest)

    logger.info(f"Trashed '{rel}' as '{trash_name}'")
    return record


@_serialized
def restore_item(workspace_root, trash_rel, name) -> str:
    """
    Move an entry out of the trash back to where it was deleted from.
    trash_rel is empty for top-level trash entries; otherwise it points inside
    a trashed folder and the entry returns beneath that folder's original path.
    Returns the relative path the entry was restored to.
    """
    trash_rel = normalize_rel_path(trash_rel)
    name = validate_entry_name(name)
    shown = join_rel(trash_rel, name)
    if not trash_rel and _is_internal(name):
        raise NotFound("Item not found in trash", shown)

    source = resolve(workspace_root, join_rel(TRASH_ROOT, shown))
    _inside_trash(workspace_root, source, shown)
    if not source.exists():
        raise NotFound("Item not found in trash", shown)

    manifest = load_manifest(workspace_root)
    if trash_rel:
        top, _, rest = trash_rel.partition("/")
        rec = manifest.get(top)
        base = join_rel(rec["original_dir"], rec["original_name"]) if rec else top
        dest_dir, dest_name = join_rel(base, rest), name
    else:
        rec = manifest.get(name)
        dest_dir = rec["original_dir"] if rec else ""
        dest_name = rec["original_name"] if rec else name

    dest_dir = normalize_rel_path(dest_dir)
    if is_within(dest_dir, TRASH_ROOT):
        raise InvalidPath("Cannot restore into the trash", dest_dir)
    directory = resolve(workspace_root, dest_dir)
    if directory.exists() and not directory.is_dir():
        raise NotADirectory("Original location is now a file", dest_dir)
    with surface_io_errors(dest_dir):
        directory.mkdir(parents=True, exist_ok=True)

    final_name = _unique_name(directory, validate_entry_name(dest_name), "restored")
    restored = join_rel(dest_dir, final_name)
    _move(source, directory / final_name, restored)

    if not trash_rel and name in manifest:
        del manifest[name]
        _save_manifest(workspace_root, manifest)

    logger.info(f"Restored '{shown}' from trash to '{restored}'")
    return restored


def list_trash(workspace_root, trash_rel="") -> List[dict]:
    trash_rel = normalize_rel_path(trash_rel)
    root = _trash_root(workspace_root)
    if not trash_rel and not root.is_dir():
        return []
    target = resolve(workspace_root, join_rel(TRASH_ROOT, trash_rel))
    _inside_trash(workspace_root, target, trash_rel)
    if not target.exists():
        raise NotFound("Folder not found in trash", trash_rel)
    if not target.is_dir():
        raise NotADirectory("Not a folder", trash_rel)

    with surface_io_errors(join_rel(TRASH_ROOT, trash_rel)):
        items = describe_entries(target)
    if not trash_rel:
        items = [i for i in items if not _is_internal(i["name"])]
        manifest = load_manifest(workspace_root)
        for item in items:
            rec = manifest.get(item["name"])
            if rec:
                item["original_path"] = join_rel(rec["original_dir"], rec["original_name"])
                item["trashed_at"] = rec.get("trashed_at")
    return items


@_serialized
def purge_item(workspace_root, trash_rel, name):
    """Permanently delete one trash entry (recursively for folders)."""
    trash_rel = normalize_rel_path(trash_rel)
    name = validate_entry_name(name)
    shown = join_rel(trash_rel, name)
    if not trash_rel and _is_internal(name):
        raise NotFound("Item not found in trash", shown)

    target = resolve(workspace_root, join_rel(TRASH_ROOT, shown))
    _inside_trash(workspace_root, target, shown)
    if target == _trash_root(workspace_root):
        raise InvalidPath("Use empty trash to clear the whole trash", shown)
    if not target.exists():
        raise NotFound("Item not found in trash", shown)

    _remove(target, join_rel(TRASH_ROOT, shown))
    if not trash_rel:
        manifest = load_manifest(workspace_root)
        if name in manifest:
            del manifest[name]
            _save_manifest(workspace_root, manifest)
    logger.info(f"Purged '{shown}' from trash")


@_serialized
def empty_trash(workspace_root, trash_rel="") -> int:
    """Remove everything beneath trash_rel (the whole trash when empty). Returns the count removed."""
    trash_rel = normalize_rel_path(trash_rel)
    root = _trash_root(workspace_root)
    if not trash_rel and not root.is_dir():
        return 0
    target = resolve(workspace_root, join_rel(TRASH_ROOT, trash_rel))
    _inside_trash(workspace_root, target, trash_rel)
    if not target.exists():
        raise NotFound("Folder not found in trash", trash_rel)
    if not target.is_dir():
        raise NotADirectory("Not a folder", trash_rel)

    removed = 0
    for entry in sorted(target.iterdir()):
        if not trash_rel and _is_internal(entry.name):
            continue
        _remove(entry, join_rel(TRASH_ROOT, trash_rel, entry.name))
        removed += 1
    if not trash_rel:
        _save_manifest(workspace_root, {})
    logger.info(f"Emptied trash '{trash_rel or '/'}': {removed} entries removed")
    return removed
