"""Core protocol and interface definitions.

Defines the RepositorySource protocol implemented by the remote-tree
(API) and local-clone ingestion strategies so the tools see one contract.
"""

from __future__ import annotations

from typing import List, Protocol

from core.models import RetrievedFile
from core.references import RepositoryReference


class RepositorySource(Protocol):
    """Contract for any ingestion strategy (GitHub API, shallow clone)."""
    async def fetch(
        self,
        ref: RepositoryReference,
        *,
        source_url: str,
    ) -> List[RetrievedFile]:
        ...
