"""
Path containment for client workspaces.
All client-supplied locations pass through resolve() before touching disk.
"""
import os
import re
from pathlib import Path

from app.core.errors import InvalidPath

NAME_MAX_LENGTH = 180

# Soft-deleted entries of a workspace live here, relative to its root
TRASH_ROOT = "99 Admin/_Trash"

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9 ._\-()&,+'@#]")
_WHITESPACE = re.compile(r"\s+")


def normalize_rel_path(raw) -> str:
    """Canonical 'a/b/c' form of a client-relative path ('' for the root)."""
    if raw is None:
        return ""
    text = str(raw).strip().replace("\\", "/")
    if "\x00" in text:
        raise InvalidPath("Path contains a NUL byte", text.replace("\x00", ""))
    if text.startswith("/") or _DRIVE_PREFIX.match(text):
        raise InvalidPath("Absolute paths are not allowed", text)
    text = text.rstrip("/")
    if not text:
        return ""
    segments = text.split("/")
    for seg in segments:
        if seg.strip() == "":
            raise InvalidPath("Path contains an empty segment", text)
        if seg in (".", ".."):
            raise InvalidPath("Path traversal is not allowed", text)
    return "/".join(segments)


def join_rel(*parts) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def resolve(workspace_root, rel_path="") -> Path:
    """Absolute location of rel_path, guaranteed to lie inside workspace_root."""
    rel = normalize_rel_path(rel_path)
    root = os.path.realpath(workspace_root)
    candidate = os.path.realpath(os.path.join(root, *rel.split("/"))) if rel else root
    if candidate != root and not candidate.startswith(root + os.sep):
        raise InvalidPath("Path escapes the workspace", rel)
    return Path(candidate)


def is_within(rel_path: str, container: str) -> bool:
    """True when normalized rel_path equals container or lies beneath it."""
    return rel_path == container or rel_path.startswith(container + "/")


def sanitize_name(name, max_length: int = NAME_MAX_LENGTH) -> str:
    """Reduce a user-supplied name to the safe character allow-list."""
    text = _UNSAFE_NAME_CHARS.sub("", str(name or ""))
    text = _WHITESPACE.sub(" ", text).strip()
    text = text.lstrip(".").strip()
    text = text[:max_length].rstrip(" .")
    return text


def validate_entry_name(name) -> str:
    """Check a name that must refer to an existing entry, without rewriting it."""
    text = str(name or "").strip()
    if not text or text in (".", ".."):
        raise InvalidPath("Name is required", text)
    if "/" in text or "\\" in text or "\x00" in text:
        raise InvalidPath("Name must not contain path separators", text.replace("\x00", ""))
    return text
