"""Immutable dataclasses shared by the ingestion strategies and the tools.

RetrievedFile is the unit both strategies return; PromptResult is what
the prompt-building tools hand back to the MCP client.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal


IngestionStrategy = Literal["api", "clone"]


@dataclass(frozen=True, slots=True)
class RetrievedFile:
    """One eligible file from a repository snapshot.

    `size` is the size reported before filtering (tree entry size or
    on-disk size), not the length of `content`. `sha` is empty when the
    source has no blob id (local clone).
    """

    path: str
    content: str
    sha: str
    size: int
    kind: Literal["file"] = "file"

    def to_dict(self, *, include_content: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if not include_content:
            data.pop("content")
        return data


@dataclass(frozen=True, slots=True)
class PromptResult:
    text: str
    token_count: int
    file_count: int
