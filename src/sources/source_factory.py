"""Factory for selecting the configured ingestion strategy.

Exposes get_repository_source which returns either an ApiSource or a
CloneSource based on the requested strategy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clients.git_client import GitCloneRunner
from clients.github import GitHubClient
from config import (
    CLONE_TIMEOUT,
    GIT_EXECUTABLE,
    GITHUB_TIMEOUT,
    HTTP_VERIFY,
    INGESTION_STRATEGY,
    MAX_FILE_SIZE,
    SCRATCH_ROOT,
)
from core.cache import IngestionCache
from core.eligibility import DEFAULT_POLICY, EligibilityPolicy
from core.errors import ValidationError
from core.interfaces import RepositorySource
from core.models import IngestionStrategy
from sources.api_source import ApiSource
from sources.clone_source import CloneRunner, CloneSource


def get_repository_source(
    strategy: IngestionStrategy,
    *,
    scratch_root: Path,
    github_timeout: float = 20.0,
    http_verify: bool = True,
    clone_timeout: float = 120.0,
    git_executable: str = "git",
    policy: EligibilityPolicy = DEFAULT_POLICY,
    github_client: Optional[GitHubClient] = None,
    clone_runner: Optional[CloneRunner] = None,
    cache: Optional[IngestionCache] = None,
) -> RepositorySource:
    """
    Factory that returns the RepositorySource for a deployment.

    - "api"   -> ApiSource (GitHub REST: tree listing + blobs)
    - "clone" -> CloneSource (shallow git clone + filesystem walk, cached)
    """

    if strategy == "api":
        client = github_client or GitHubClient(timeout=github_timeout, verify=http_verify)
        return ApiSource(client=client, policy=policy)

    if strategy == "clone":
        runner = clone_runner or GitCloneRunner(executable=git_executable, timeout=clone_timeout)
        return CloneSource(runner=runner, scratch_root=scratch_root, cache=cache, policy=policy)

    raise ValidationError(f"Unknown ingestion strategy: {strategy!r}")


def get_configured_source() -> RepositorySource:
    """RepositorySource built from environment configuration (see config.py)."""
    return get_repository_source(
        INGESTION_STRATEGY,
        scratch_root=SCRATCH_ROOT,
        github_timeout=GITHUB_TIMEOUT,
        http_verify=HTTP_VERIFY,
        clone_timeout=CLONE_TIMEOUT,
        git_executable=GIT_EXECUTABLE,
        policy=EligibilityPolicy(max_size=MAX_FILE_SIZE),
    )
