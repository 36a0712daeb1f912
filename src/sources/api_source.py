from __future__ import annotations

from typing import List

from clients.github import GitHubClient
from core.eligibility import DEFAULT_POLICY, EligibilityPolicy
from core.models import RetrievedFile
from core.references import RepositoryReference


"""GitHub API-backed RepositorySource implementation.

Lists the default-branch tree and fetches each eligible blob. Nothing is
cached: every call reflects the current tip of the default branch.
"""


class ApiSource:
    def __init__(self, *, client: GitHubClient, policy: EligibilityPolicy = DEFAULT_POLICY) -> None:
        self._client = client
        self._policy = policy

    async def fetch(self, ref: RepositoryReference, *, source_url: str) -> List[RetrievedFile]:
        return await self._client.fetch_repository_files(ref, policy=self._policy)
