"""GitHub client module: list a repository snapshot and fetch eligible blobs.

This module provides a small async client focused on the remote-tree
ingestion path: resolve the default branch to a commit (Git Refs API),
list the recursive tree (Git Trees API) and fetch each eligible file
(Git Blobs API). It relies on `core.rate_limiter.RateLimiter` to detect
quota exhaustion and fail fast instead of retrying.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, List, Mapping, Optional

import httpx

from config import GITHUB_API_URL
from core.eligibility import DEFAULT_POLICY, EligibilityPolicy
from core.errors import ExternalServiceError, IngestionTimeoutError, NotFoundError
from core.models import RetrievedFile
from core.rate_limiter import RateLimiter
from core.references import RepositoryReference

from .blobs import BlobDecodeError, decode_blob
from .refs import fetch_default_branch, json_object, resolve_commit_sha

logger = logging.getLogger(__name__)


class GitHubClient:
    """Async GitHub client for the remote-tree ingestion strategy.

    Purpose:
      - fetch_repository_files(ref, policy) -> List[RetrievedFile]

    Key behavior:
      - Every request is bounded by `timeout`; a timeout raises IngestionTimeoutError.
      - Limits concurrency (Semaphore) across all calls sharing this client.
      - Quota exhaustion raises RateLimitedError immediately; nothing is retried.
      - Blobs that cannot be decoded are logged and skipped.
    """

    JSON_ACCEPT = "application/vnd.github+json"

    def __init__(
        self,
        *,
        base_url: str = GITHUB_API_URL,
        timeout: float = 20.0,
        verify: bool = True,
        max_concurrency: int = 5,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._base_url = (base_url or GITHUB_API_URL).rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify)

        self._headers = self._build_headers()

        self._sem = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._rate_limiter = rate_limiter or RateLimiter()

    async def fetch_repository_files(
        self,
        ref: RepositoryReference,
        *,
        policy: EligibilityPolicy = DEFAULT_POLICY,
    ) -> List[RetrievedFile]:
        """Eligible files of the default branch tip, in tree order."""
        owner, repo = ref.owner, ref.name

        async with self._create_client() as client:
            branch = await fetch_default_branch(self._request, client, owner=owner, repo=repo)
            commit_sha = await resolve_commit_sha(
                self._request,
                client,
                owner=owner,
                repo=repo,
                branch=branch,
            )

            # Git Trees API expects recursive=1 to list nested files
            resp = await self._request(
                client,
                f"/repos/{owner}/{repo}/git/trees/{commit_sha}",
                params={"recursive": "1"},
            )
            if resp.status_code == 404:
                raise NotFoundError(f"Tree not found for commit: {commit_sha}")
            self._raise_for_status(resp, context="tree")

            data = json_object(resp, context="tree")
            if data.get("truncated"):
                # A partial listing would silently drop files
                logger.warning("Tree listing for %s was truncated by GitHub", ref.slug)
                raise ExternalServiceError(
                    f"Tree listing for {ref.slug} is truncated by GitHub; use the clone strategy"
                )

            entries = data.get("tree") or []
            if not isinstance(entries, list):
                raise ExternalServiceError(f"Unexpected tree payload for {ref.slug}")

            out: List[RetrievedFile] = []
            seen: set[str] = set()
            for item in entries:
                if not isinstance(item, dict) or item.get("type") != "blob":
                    continue
                path = item.get("path")
                sha = item.get("sha")
                if not isinstance(path, str) or not isinstance(sha, str) or path in seen:
                    continue

                size = item.get("size")
                if not isinstance(size, int) or isinstance(size, bool):
                    size = 0
                # Size/extension are checked before the blob is requested
                if not policy.allows(path, size):
                    continue

                content = await self._fetch_blob_text(client, owner=owner, repo=repo, sha=sha, path=path)
                if content is None:
                    continue

                seen.add(path)
                out.append(RetrievedFile(path=path, content=content, sha=sha, size=size))

            return out

    async def _fetch_blob_text(
        self,
        client: httpx.AsyncClient,
        *,
        owner: str,
        repo: str,
        sha: str,
        path: str,
    ) -> Optional[str]:
        resp = await self._request(client, f"/repos/{owner}/{repo}/git/blobs/{sha}")
        self._raise_for_status(resp, context=f"blob {path}")

        try:
            return decode_blob(resp.json())
        except (BlobDecodeError, ValueError) as e:
            logger.info("Skipping %s: %s", path, e)
            return None

    # --- HTTP helpers ---

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": self.JSON_ACCEPT,
            "User-Agent": "repo-pack-mcp",
        }
        # If GITHUB_TOKEN present, add Authorization for higher rate limits
        token = (os.environ.get("GITHUB_TOKEN") or "").strip()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _create_client(self, custom_headers: Optional[Mapping[str, str]] = None) -> httpx.AsyncClient:
        headers = {**self._headers, **dict(custom_headers or {})}
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    def _external(self, context: str, err: BaseException) -> ExternalServiceError:
        return ExternalServiceError(f"GitHub request failed ({context}): {err}")

    def _raise_for_status(self, resp: httpx.Response, *, context: str) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._external(context, e) from e

    async def _request(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """GET with a concurrency bound; translates timeouts and quota exhaustion."""
        try:
            # Limit concurrent requests across tasks
            async with self._sem:
                resp = await client.get(url, params=dict(params or {}))
        except httpx.TimeoutException as e:
            raise IngestionTimeoutError(f"GitHub request timed out (GET {url})") from e
        except httpx.HTTPError as e:
            raise self._external(f"GET {url}", e) from e

        self._rate_limiter.raise_if_limited(resp)
        return resp
