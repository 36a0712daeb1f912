"""File eligibility policy shared by both ingestion strategies.

A file is eligible unless its extension is in the ignore-set or its size
exceeds the ceiling. Both checks run before any content is read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from config import MAX_FILE_SIZE
from core.paths import extension_of


IGNORED_EXTENSIONS: FrozenSet[str] = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".ico", ".pdf",
    ".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx",
    ".zip", ".tar", ".gz", ".rar", ".7z",
    ".exe", ".dll", ".so", ".dylib",
})


@dataclass(frozen=True, slots=True)
class EligibilityPolicy:
    ignored_extensions: FrozenSet[str] = field(default=IGNORED_EXTENSIONS)
    max_size: int = MAX_FILE_SIZE

    def allows(self, path: str, size: int) -> bool:
        if extension_of(path) in self.ignored_extensions:
            return False
        if int(size) > self.max_size:
            return False
        return True


DEFAULT_POLICY = EligibilityPolicy()


def is_eligible(path: str, size: int) -> bool:
    return DEFAULT_POLICY.allows(path, size)
