import base64

import httpx
import pytest

from clients.github import GitHubClient
from core.eligibility import EligibilityPolicy
from core.errors import (
    ExternalServiceError,
    IngestionTimeoutError,
    NotFoundError,
    RateLimitedError,
)
from core.references import RepositoryReference


REF = RepositoryReference(host="github.com", owner="octocat", name="Hello-World")
REPO = "/repos/octocat/Hello-World"


# ---------------------------
# Helpers
# ---------------------------

def patch_github_transport(monkeypatch, client: GitHubClient, routes: dict, seen: list | None = None):
    """
    Patch GitHubClient._create_client() to use httpx.MockTransport.

    routes keys:
        (METHOD, PATH) -> httpx.Response  OR  (status_code, json, headers)
    """
    def handler(request: httpx.Request) -> httpx.Response:
        key = (request.method.upper(), request.url.path)
        if seen is not None:
            seen.append(request.url.path)

        if key not in routes:
            return httpx.Response(404, json={"message": "not found"})

        val = routes[key]

        if isinstance(val, Exception):
            raise val
        if isinstance(val, httpx.Response):
            return val

        status_code, js, headers = val
        return httpx.Response(status_code, json=js, headers=headers or {})

    transport = httpx.MockTransport(handler)

    def _create_client(custom_headers=None):
        headers = {**client._headers, **(custom_headers or {})}
        return httpx.AsyncClient(
            base_url=client._base_url,
            headers=headers,
            timeout=client._timeout,
            verify=client._verify,
            transport=transport,
        )

    monkeypatch.setattr(client, "_create_client", _create_client)


def blob(text: str) -> tuple:
    encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
    return (200, {"encoding": "base64", "content": encoded}, None)


def base_routes(tree: list) -> dict:
    return {
        ("GET", REPO): (200, {"default_branch": "main"}, None),
        ("GET", f"{REPO}/git/ref/heads/main"): (200, {"object": {"sha": "c0ffee"}}, None),
        ("GET", f"{REPO}/git/trees/c0ffee"): (200, {"sha": "c0ffee", "tree": tree, "truncated": False}, None),
    }


# ---------------------------
# fetch_repository_files
# ---------------------------

@pytest.mark.asyncio
async def test_fetch_repository_files_success(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        {"path": "README.md", "type": "blob", "sha": "b1", "size": 5},
        {"path": "src", "type": "tree", "sha": "t1"},
        {"path": "src/app.py", "type": "blob", "sha": "b2", "size": 12},
    ])
    routes[("GET", f"{REPO}/git/blobs/b1")] = blob("hello")
    routes[("GET", f"{REPO}/git/blobs/b2")] = blob("print('hi')\n")

    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)

    assert [f.path for f in out] == ["README.md", "src/app.py"]
    assert out[0].content == "hello"
    assert out[0].sha == "b1"
    assert out[0].size == 5
    assert out[1].content == "print('hi')\n"
    assert all(f.kind == "file" for f in out)


@pytest.mark.asyncio
async def test_fetch_repository_files_uses_non_main_default_branch(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = {
        ("GET", REPO): (200, {"default_branch": "trunk"}, None),
        ("GET", f"{REPO}/git/ref/heads/trunk"): (200, {"object": {"sha": "abc"}}, None),
        ("GET", f"{REPO}/git/trees/abc"): (200, {"tree": [{"path": "a.txt", "type": "blob", "sha": "x", "size": 1}]}, None),
        ("GET", f"{REPO}/git/blobs/x"): blob("a"),
    }
    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)
    assert [(f.path, f.content) for f in out] == [("a.txt", "a")]


@pytest.mark.asyncio
async def test_ineligible_entries_are_never_fetched(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        {"path": "logo.PNG", "type": "blob", "sha": "img", "size": 10},
        {"path": "big.txt", "type": "blob", "sha": "big", "size": 11},
        {"path": "ok.txt", "type": "blob", "sha": "ok", "size": 2},
    ])
    routes[("GET", f"{REPO}/git/blobs/ok")] = blob("ok")

    seen = []
    patch_github_transport(monkeypatch, client, routes, seen=seen)

    out = await client.fetch_repository_files(REF, policy=EligibilityPolicy(max_size=10))

    assert [f.path for f in out] == ["ok.txt"]
    assert f"{REPO}/git/blobs/img" not in seen
    assert f"{REPO}/git/blobs/big" not in seen


@pytest.mark.asyncio
async def test_one_corrupt_blob_among_ten_is_skipped(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    tree = [{"path": f"f{i}.txt", "type": "blob", "sha": f"s{i}", "size": 3} for i in range(10)]
    routes = base_routes(tree)
    for i in range(10):
        routes[("GET", f"{REPO}/git/blobs/s{i}")] = blob(f"f{i}")
    # Not valid UTF-8 once decoded
    routes[("GET", f"{REPO}/git/blobs/s4")] = (
        200,
        {"encoding": "base64", "content": base64.b64encode(b"\xff\xfe\x00bad").decode("ascii")},
        None,
    )

    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)

    assert len(out) == 9
    assert "f4.txt" not in [f.path for f in out]
    assert [f.path for f in out] == [f"f{i}.txt" for i in range(10) if i != 4]


@pytest.mark.asyncio
async def test_invalid_base64_blob_is_skipped(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        {"path": "a.txt", "type": "blob", "sha": "a", "size": 1},
        {"path": "b.txt", "type": "blob", "sha": "b", "size": 1},
    ])
    routes[("GET", f"{REPO}/git/blobs/a")] = (200, {"encoding": "base64", "content": "abc"}, None)
    routes[("GET", f"{REPO}/git/blobs/b")] = blob("b")

    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)
    assert [f.path for f in out] == ["b.txt"]


@pytest.mark.asyncio
async def test_repeated_calls_return_identical_results(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        {"path": "z.txt", "type": "blob", "sha": "z", "size": 1},
        {"path": "a.txt", "type": "blob", "sha": "a", "size": 1},
    ])
    routes[("GET", f"{REPO}/git/blobs/z")] = blob("z")
    routes[("GET", f"{REPO}/git/blobs/a")] = blob("a")
    patch_github_transport(monkeypatch, client, routes)

    first = await client.fetch_repository_files(REF)
    second = await client.fetch_repository_files(REF)
    assert first == second
    # Tree order is preserved, not sorted
    assert [f.path for f in first] == ["z.txt", "a.txt"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        (403, {"message": "API rate limit exceeded"}, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "9999999999"}),
        (429, {"message": "slow down"}, {"Retry-After": "30"}),
        (
            403,
            {"message": "You have exceeded a secondary rate limit. Please wait a few minutes."},
            {"Retry-After": "60", "X-RateLimit-Remaining": "4000"},
        ),
    ],
)
async def test_rate_limited_response_fails_fast(monkeypatch, response):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([{"path": "a.txt", "type": "blob", "sha": "a", "size": 1}])
    routes[("GET", f"{REPO}/git/blobs/a")] = response

    seen = []
    patch_github_transport(monkeypatch, client, routes, seen=seen)

    with pytest.raises(RateLimitedError):
        await client.fetch_repository_files(REF)

    # No retry
    assert seen.count(f"{REPO}/git/blobs/a") == 1


@pytest.mark.asyncio
async def test_rate_limit_on_metadata_is_distinct_from_not_found(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = {
        ("GET", REPO): (403, {"message": "rate limited"}, {"X-RateLimit-Remaining": "0"}),
    }
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(RateLimitedError) as exc:
        await client.fetch_repository_files(REF)
    assert not isinstance(exc.value, NotFoundError)


@pytest.mark.asyncio
async def test_repository_not_found(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)
    patch_github_transport(monkeypatch, client, {})

    with pytest.raises(NotFoundError):
        await client.fetch_repository_files(REF)


@pytest.mark.asyncio
async def test_tree_not_found(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([])
    del routes[("GET", f"{REPO}/git/trees/c0ffee")]
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(NotFoundError):
        await client.fetch_repository_files(REF)


@pytest.mark.asyncio
async def test_blob_server_error_fails_the_call(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([{"path": "a.txt", "type": "blob", "sha": "a", "size": 1}])
    routes[("GET", f"{REPO}/git/blobs/a")] = (502, {"message": "bad gateway"}, None)
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(ExternalServiceError):
        await client.fetch_repository_files(REF)


@pytest.mark.asyncio
async def test_timeout_is_reported_as_timeout(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = {("GET", REPO): httpx.ReadTimeout("timed out")}
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(IngestionTimeoutError):
        await client.fetch_repository_files(REF)


@pytest.mark.asyncio
async def test_connection_error_is_external_service_error(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = {("GET", REPO): httpx.ConnectError("refused")}
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(ExternalServiceError):
        await client.fetch_repository_files(REF)


def test_headers_include_token(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "tok")
    client = GitHubClient()
    assert client._headers["Authorization"] == "Bearer tok"

    monkeypatch.delenv("GITHUB_TOKEN")
    assert "Authorization" not in GitHubClient()._headers


@pytest.mark.asyncio
async def test_truncated_tree_fails_instead_of_returning_partial_list(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([{"path": "a.txt", "type": "blob", "sha": "a", "size": 1}])
    routes[("GET", f"{REPO}/git/trees/c0ffee")] = (
        200,
        {"sha": "c0ffee", "tree": [{"path": "a.txt", "type": "blob", "sha": "a", "size": 1}], "truncated": True},
        None,
    )
    routes[("GET", f"{REPO}/git/blobs/a")] = blob("a")

    seen = []
    patch_github_transport(monkeypatch, client, routes, seen=seen)

    with pytest.raises(ExternalServiceError, match="truncated"):
        await client.fetch_repository_files(REF)
    assert f"{REPO}/git/blobs/a" not in seen


@pytest.mark.asyncio
async def test_null_tree_is_an_empty_repository(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([])
    routes[("GET", f"{REPO}/git/trees/c0ffee")] = (200, {"sha": "c0ffee", "tree": None}, None)
    patch_github_transport(monkeypatch, client, routes)

    assert await client.fetch_repository_files(REF) == []


@pytest.mark.asyncio
async def test_malformed_tree_entries_are_ignored(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        "not-an-entry",
        None,
        {"path": "a.txt", "type": "blob", "sha": "a", "size": "huge"},
    ])
    routes[("GET", f"{REPO}/git/blobs/a")] = blob("a")
    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)
    assert [(f.path, f.size) for f in out] == [("a.txt", 0)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "route,payload",
    [
        (REPO, ["not", "an", "object"]),
        (f"{REPO}/git/trees/c0ffee", {"tree": "oops"}),
        (f"{REPO}/git/trees/c0ffee", [1, 2]),
    ],
)
async def test_unexpected_payload_shapes_are_external_service_errors(monkeypatch, route, payload):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([])
    routes[("GET", route)] = (200, payload, None)
    patch_github_transport(monkeypatch, client, routes)

    with pytest.raises(ExternalServiceError):
        await client.fetch_repository_files(REF)


@pytest.mark.asyncio
async def test_non_object_blob_payload_is_skipped(monkeypatch):
    client = GitHubClient(timeout=5.0, verify=False)

    routes = base_routes([
        {"path": "a.txt", "type": "blob", "sha": "a", "size": 1},
        {"path": "b.txt", "type": "blob", "sha": "b", "size": 1},
    ])
    routes[("GET", f"{REPO}/git/blobs/a")] = (200, ["a"], None)
    routes[("GET", f"{REPO}/git/blobs/b")] = blob("b")
    patch_github_transport(monkeypatch, client, routes)

    out = await client.fetch_repository_files(REF)
    assert [f.path for f in out] == ["b.txt"]
