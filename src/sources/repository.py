"""Single entry point for repository ingestion.

`get_repository_files` resolves the URL, dispatches to the configured
source and guarantees callers see either a complete file list or exactly
one IngestionError.
"""

from __future__ import annotations

from typing import List

import httpx

from core.errors import ExternalServiceError, IngestionError
from core.interfaces import RepositorySource
from core.models import RetrievedFile
from core.references import require_reference


async def get_repository_files(url: str, *, source: RepositorySource) -> List[RetrievedFile]:
    ref = require_reference(url)
    source_url = url.strip()

    try:
        files = await source.fetch(ref, source_url=source_url)
    except IngestionError:
        raise
    except (OSError, httpx.HTTPError, ValueError, TypeError, KeyError, AttributeError) as e:
        # Malformed upstream data surfaces as one of these outside the clients
        raise ExternalServiceError(f"Failed to ingest {ref.slug}: {e}") from e

    # Paths are unique within one result; first occurrence wins
    out: List[RetrievedFile] = []
    seen: set[str] = set()
    for f in files:
        if f.path in seen:
            continue
        seen.add(f.path)
        out.append(f)
    return out
