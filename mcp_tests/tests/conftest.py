import pytest

from core.models import RetrievedFile


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


class FakeSource:
    """RepositorySource stand-in returning a fixed file list."""

    def __init__(self, files=None, error=None):
        self._files = list(files or [])
        self._error = error
        self.calls = []

    async def fetch(self, ref, *, source_url: str):
        self.calls.append((ref, source_url))
        if self._error is not None:
            raise self._error
        return list(self._files)


def make_file(path: str, content: str = "", size=None, sha: str = "") -> RetrievedFile:
    return RetrievedFile(
        path=path,
        content=content,
        sha=sha,
        size=len(content.encode("utf-8")) if size is None else size,
    )


@pytest.fixture
def dummy_mcp():
    return DummyMCP()
