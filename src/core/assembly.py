"""Selection and text assembly for repository files.

Turns an ingestion result plus an ordered selection into the single
prompt document, and provides the folder/select-all selection helpers
and the directory outline shown to the user.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.models import RetrievedFile
from core.paths import clean_folder, normalize_posix_relpath, split_posix
from core.references import RepositoryReference

_WHITESPACE_RE = re.compile(r"\s+")


def minify_text(text: str) -> str:
    """Collapse every whitespace run to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def assemble(
    files: Iterable[RetrievedFile],
    selected_paths: Sequence[str],
    *,
    include_path: bool = False,
    minify: bool = False,
) -> str:
    """Join the selected files, in selection order, into one document.

    Each block is the (optionally minified) content, preceded by a
    `[path:<path>]` line when `include_path` is set, followed by a blank
    line. The final document is trimmed. Paths not present in `files` are
    skipped.
    """
    by_path: Dict[str, RetrievedFile] = {}
    for f in files:
        by_path.setdefault(f.path, f)

    combined = ""
    for path in selected_paths:
        file = by_path.get(path)
        if file is None:
            continue

        content = file.content
        if minify:
            content = minify_text(content)

        if include_path:
            combined += f"[path:{file.path}]\n{content}\n\n"
        else:
            combined += f"{content}\n\n"

    return combined.strip()


class Selection:
    """Ordered, duplicate-free set of selected paths."""

    def __init__(self, paths: Optional[Iterable[str]] = None) -> None:
        self._paths: List[str] = []
        for p in paths or ():
            self._add(p)

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def _add(self, path: str) -> None:
        if path not in self._paths:
            self._paths.append(path)

    def toggle_file(self, path: str) -> None:
        if path in self._paths:
            self._paths.remove(path)
        else:
            self._paths.append(path)

    def set_folder(self, files: Iterable[RetrievedFile], folder: str, checked: bool) -> None:
        """Select or deselect every file under `folder` (file order is kept)."""
        prefix = clean_folder(folder)
        folder_paths = [
            f.path for f in files
            if not prefix or f.path.startswith(prefix + "/")
        ]
        if checked:
            for p in folder_paths:
                self._add(p)
        else:
            drop = set(folder_paths)
            self._paths = [p for p in self._paths if p not in drop]

    def select_all(self, files: Iterable[RetrievedFile]) -> None:
        self._paths = []
        for f in files:
            self._add(f.path)

    def clear(self) -> None:
        self._paths = []


def build_selection(
    files: Sequence[RetrievedFile],
    *,
    paths: Optional[Iterable[str]] = None,
    folders: Optional[Iterable[str]] = None,
    select_all: bool = False,
) -> Selection:
    """Selection from explicit paths first, then whole folders, or everything."""
    selection = Selection()
    if select_all:
        selection.select_all(files)
        return selection

    known = {f.path for f in files}
    for raw in paths or ():
        p = normalize_posix_relpath(raw)
        if p in known and p not in selection:
            selection.toggle_file(p)
    for folder in folders or ():
        selection.set_folder(files, folder, True)
    return selection


def build_tree(files: Iterable[RetrievedFile]) -> Dict[str, Any]:
    """Nest files into {name: {"type": "dir", "path", "children"} | {"type": "file", ...}}."""
    root: Dict[str, Any] = {}
    for f in files:
        parts = split_posix(f.path)
        if not parts:
            continue
        level = root
        for i, part in enumerate(parts[:-1]):
            node = level.get(part)
            if node is None or node.get("type") != "dir":
                node = {"type": "dir", "path": "/".join(parts[: i + 1]), "children": {}}
                level[part] = node
            level = node["children"]
        level[parts[-1]] = {"type": "file", "path": f.path, "size": f.size}
    return root


def render_tree(tree: Dict[str, Any], *, indent: str = "  ") -> str:
    """Text outline of `build_tree` output, directories before files."""
    lines: List[str] = []

    def walk(level: Dict[str, Any], depth: int) -> None:
        # Stable sort: dirs first, insertion order otherwise
        entries = sorted(level.items(), key=lambda kv: kv[1]["type"] != "dir")
        for name, node in entries:
            if node["type"] == "dir":
                lines.append(f"{indent * depth}{name}/")
                walk(node["children"], depth + 1)
            else:
                lines.append(f"{indent * depth}{name}")

    walk(tree, 0)
    return "\n".join(lines)


def export_filename(ref: RepositoryReference) -> str:
    return f"{ref.owner}_{ref.name}.txt"
