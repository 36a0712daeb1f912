from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol

from core.cache import IngestionCache, get_default_cache
from core.eligibility import DEFAULT_POLICY, EligibilityPolicy
from core.errors import ExternalServiceError
from core.models import RetrievedFile
from core.references import RepositoryReference
from core.scratch import scratch_directory


"""Shallow-clone RepositorySource implementation.

Clones into an exclusively owned scratch directory, walks it, and caches
the result per source URL for the cache's validity window.
"""

logger = logging.getLogger(__name__)

_VCS_DIR = ".git"


class CloneRunner(Protocol):
    async def clone(self, url: str, target: Path) -> None:
        ...


def _read_text(path: Path, rel_path: str) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        logger.info("Recording %s with empty content: not valid UTF-8", rel_path)
        return ""
    except OSError as e:
        logger.warning("Recording %s with empty content: %s", rel_path, e)
        return ""


def walk_repository(root: Path, *, policy: EligibilityPolicy = DEFAULT_POLICY) -> List[RetrievedFile]:
    """Eligible regular files under `root`, depth-first with entries sorted by name.

    The `.git` directory is never entered. Symlinks are not followed.
    """
    out: List[RetrievedFile] = []

    def walk(directory: Path, prefix: str) -> None:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            rel_path = f"{prefix}/{entry.name}" if prefix else entry.name

            if entry.is_dir(follow_symlinks=False):
                if entry.name != _VCS_DIR:
                    walk(Path(entry.path), rel_path)
                continue

            if not entry.is_file(follow_symlinks=False):
                continue

            size = entry.stat(follow_symlinks=False).st_size
            if not policy.allows(rel_path, size):
                continue

            out.append(
                RetrievedFile(
                    path=rel_path,
                    content=_read_text(Path(entry.path), rel_path),
                    sha="",  # no blob id for files read from disk
                    size=size,
                )
            )

    walk(Path(root), "")
    return out


class CloneSource:
    def __init__(
        self,
        *,
        runner: CloneRunner,
        scratch_root: Path,
        cache: Optional[IngestionCache] = None,
        policy: EligibilityPolicy = DEFAULT_POLICY,
    ) -> None:
        self._runner = runner
        self._scratch_root = Path(scratch_root)
        self._cache = cache or get_default_cache()
        self._policy = policy

    async def fetch(self, ref: RepositoryReference, *, source_url: str) -> List[RetrievedFile]:
        async with self._cache.exclusive(source_url):
            cached = self._cache.get(source_url)
            if cached is not None:
                logger.debug("Cache hit for %s", source_url)
                return list(cached)

            with scratch_directory(ref, root=self._scratch_root) as workdir:
                await self._runner.clone(ref.clone_url, workdir)
                try:
                    # Offload blocking filesystem IO to a thread to keep async loop responsive
                    files = await asyncio.to_thread(walk_repository, workdir, policy=self._policy)
                except OSError as e:
                    raise ExternalServiceError(f"Failed to read cloned repository: {e}") from e

            logger.info("Ingested %d files from %s", len(files), ref.slug)
            self._cache.set(source_url, files)
            return list(files)
