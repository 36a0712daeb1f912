"""Scratch directories for one clone operation.

`scratch_directory` creates a uniquely named directory and removes it on
every exit path. Removal failures are logged and never replace the
result or the error of the body.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from core.errors import ExternalServiceError
from core.references import RepositoryReference

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^\w.-]")


def _prefix_for(ref: RepositoryReference) -> str:
    owner = _UNSAFE_CHARS_RE.sub("_", ref.owner)
    name = _UNSAFE_CHARS_RE.sub("_", ref.name)
    return f"repo_{owner}_{name}_{time.time_ns()}_"


def remove_tree(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("Failed to remove scratch directory %s: %s", path, e)


@contextmanager
def scratch_directory(ref: RepositoryReference, *, root: Path) -> Iterator[Path]:
    root = Path(root)
    try:
        root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=_prefix_for(ref), dir=root))
    except OSError as e:
        raise ExternalServiceError(f"Could not create scratch directory under {root}: {e}") from e

    try:
        yield path
    finally:
        remove_tree(path)
