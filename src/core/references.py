"""Parse repository URLs into RepositoryReference values.

`resolve` is pure and never touches the network: it returns None for
anything that is not `http(s)://<host>/<owner>/<name>[/...]` on the
configured host. `require_reference` is the raising variant used at the
entry point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from config import GITHUB_HOST
from core.errors import InvalidReferenceError
from core.paths import split_posix


@dataclass(frozen=True, slots=True)
class RepositoryReference:
    host: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def clone_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.name}.git"


def resolve(url: str, *, host: str = GITHUB_HOST) -> Optional[RepositoryReference]:
    raw = (url or "").strip()
    if not raw:
        return None

    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
    except ValueError:
        return None

    if parts.scheme.lower() not in ("http", "https"):
        return None
    if not hostname or hostname.lower() != host.lower():
        return None

    segments = split_posix(parts.path)
    if len(segments) < 2:
        return None

    owner, name = segments[0], segments[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        return None

    return RepositoryReference(host=hostname.lower(), owner=owner, name=name)


def require_reference(url: str, *, host: str = GITHUB_HOST) -> RepositoryReference:
    ref = resolve(url, host=host)
    if ref is None:
        raise InvalidReferenceError("Invalid repository URL provided.")
    return ref
