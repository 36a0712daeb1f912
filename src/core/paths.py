from __future__ import annotations

from pathlib import PurePosixPath
from typing import Tuple

"""
Path utilities used across the project.

Provides consistent POSIX-style normalization for repository-relative
paths and the extension lookup used by the eligibility filter.
"""


def normalize_posix_relpath(p: str) -> str:
    """Normalize a user path to a clean POSIX relative path.

    Converts backslashes to '/', trims whitespace, removes leading '/'
    and repeated './' markers.
    """
    s = (p or "").strip()
    s = s.replace("\\", "/")        # Unify path separators across OSes.
    s = s.lstrip("/")               # Prevent accidental absolute paths.
    while s.startswith("./"):       # Drop repeated "./" prefixes.
        s = s[2:]
    return s


def clean_folder(folder: str) -> str:
    """Normalize a folder hint; '.', './', '/' and empty mean the repository root ('')."""
    r = (folder or "").strip().replace("\\", "/")
    if r in ("", ".", "./", "/"):
        return ""
    while r.startswith("./"):
        r = r[2:]
    return r.strip("/")


def split_posix(p: str) -> Tuple[str, ...]:
    """Split a POSIX path into non-empty segments."""
    s = (p or "").strip().replace("\\", "/").strip("/")
    if not s:
        return tuple()
    return tuple(seg for seg in s.split("/") if seg)


def extension_of(p: str) -> str:
    """Lower-cased final extension of the last path component ('' for dotfiles)."""
    return PurePosixPath(p or "").suffix.lower()
