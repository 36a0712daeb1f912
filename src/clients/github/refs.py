from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict
import httpx
from core.errors import ExternalServiceError, NotFoundError

RequestFn = Callable[[httpx.AsyncClient, str], Awaitable[httpx.Response]]

async def fetch_default_branch(
    request: RequestFn,
    client: httpx.AsyncClient,
    *,
    owner: str,
    repo: str,
) -> str:
    resp = await request(client, f"/repos/{owner}/{repo}")
    if resp.status_code == 404:
        raise NotFoundError(f"Repository not found: {owner}/{repo}")
    _raise_for_status(resp, context="repository metadata")

    default_branch = json_object(resp, context="repository metadata").get("default_branch") or "main"
    return str(default_branch).strip() or "main"

async def resolve_commit_sha(
    request: RequestFn,
    client: httpx.AsyncClient,
    *,
    owner: str,
    repo: str,
    branch: str,
) -> str:
    # Git refs API: heads/<branch> -> object.sha is the tip commit
    resp = await request(client, f"/repos/{owner}/{repo}/git/ref/heads/{branch}")
    if resp.status_code in (404, 409, 422):
        # 409 is returned for empty repositories
        raise NotFoundError(f"Unable to resolve branch: {branch}")
    _raise_for_status(resp, context="branch ref")

    data = json_object(resp, context="branch ref")
    try:
        return str(data["object"]["sha"])
    except (KeyError, TypeError) as e:
        raise ExternalServiceError(f"Unexpected ref payload for branch {branch}") from e

def json_object(resp: httpx.Response, *, context: str) -> Dict[str, Any]:
    """Decoded JSON body, which must be an object."""
    try:
        data = resp.json()
    except ValueError as e:
        raise ExternalServiceError(f"Invalid JSON from GitHub ({context})") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ExternalServiceError(f"Unexpected GitHub payload ({context}): expected an object")
    return data

def _raise_for_status(resp: httpx.Response, *, context: str) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ExternalServiceError(f"GitHub request failed ({context}): {e}") from e
